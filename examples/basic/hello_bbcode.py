"""Parse a chat message into text and style runs, zero config."""

from bbstyle import parse

styled = parse("[b]Hello[/b] [color=red]World[/color], see [url=http://example.com]this[/url]")
print(styled.text)
for run in styled.runs:
    print(f"  {run.kind.name:<8} [{run.start}, {run.end})  {run.payload}")
