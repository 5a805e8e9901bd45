"""Icons render immediately as a glyph and swap in when the image arrives."""

import queue

from bbstyle import BBCode, HttpxImageFetcher

# Stand-in for a UI event loop: callbacks are queued and run on this thread
ui_queue: queue.SimpleQueue = queue.SimpleQueue()

with HttpxImageFetcher(timeout=10) as fetcher:
    bb = BBCode(image_fetcher=fetcher, dispatch=ui_queue.put)
    styled = bb("[icon]Bob[/icon] waves [eicon]wave[/eicon]")

    for placeholder in styled.placeholders:
        placeholder.add_listener(lambda p: print(f"run {p.run_id} ready: {len(p.image)} bytes"))
        print(f"run {placeholder.run_id} pending: {placeholder.current}")

    try:
        while True:
            ui_queue.get(timeout=5)()
    except queue.Empty:
        pass
