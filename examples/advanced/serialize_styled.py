"""Hand parse results to another process: JSON round-trip."""

from bbstyle import parse
from bbstyle.serialization import from_json, to_json

styled = parse("[session=Cool Room]ADH-123[/session] [sup]2[/sup] [i]italic[/i]")

json_str = to_json(styled, indent=2)
restored = from_json(json_str)

print("Original == restored:", styled == restored)
print(json_str)
