"""Thread safe: parse 1000 chat messages in parallel."""

from concurrent.futures import ThreadPoolExecutor

from bbstyle import BBCode

bb = BBCode(autolink=True)
messages = [f"[b]user{i}[/b]: check http://example.com/{i} [color=blue]now[/color]" for i in range(1000)]

with ThreadPoolExecutor(max_workers=8) as ex:
    results = list(ex.map(bb, messages))

print(f"Parsed {len(results)} messages in parallel")
print("First message:", results[0].text)
print("Last message runs:", len(results[-1].runs))
