import re

# Matches user mentions like <@U0AGAKQ1V54> or <@U123|alex>
MENTION_PATTERN = re.compile(r"<@.*?>")


def strip_mentions(text: str | None) -> str:
    """Remove mention markup and surrounding whitespace."""
    text = text or ""
    # Removing one mention can splice its neighbours into another, e.g. <<@U1>@U2>
    while MENTION_PATTERN.search(text):
        text = MENTION_PATTERN.sub("", text)
    return text.strip()
