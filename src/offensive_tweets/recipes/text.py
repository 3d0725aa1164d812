# text.py
from __future__ import annotations

import re
from typing import List

EMOJI_CHARS = (
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map symbols
    "\U0001F900-\U0001F9FF"  # supplemental symbols
    "\U0001F1E0-\U0001F1FF"  # flags
    "\u2600-\u27BF"  # misc symbols, dingbats
)
EMOJI_RE = re.compile(f"[{EMOJI_CHARS}]")
WORD_RE = re.compile(r"\w+(?:['’]\w+)*")
WORD_OR_EMOJI_RE = re.compile(rf"[{EMOJI_CHARS}]|\w+(?:['’]\w+)*")


def tokenize(text: str, lowercase: bool = True, keep_emoji: bool = False) -> List[str]:
    """Split text into word tokens (and single-character emoji tokens), order kept."""
    if not isinstance(text, str):
        return []
    if lowercase:
        text = text.lower()
    pattern = WORD_OR_EMOJI_RE if keep_emoji else WORD_RE
    return pattern.findall(text)


def is_emoji(token: str) -> bool:
    return len(token) == 1 and EMOJI_RE.match(token) is not None


MENTION_RE = re.compile(r"@\w+")
URL_RE = re.compile(r"(https?://\S+|www\.\S+)")
LBR_RE = re.compile(r"\|LBR\|")


def normalize_tweet(text: str) -> str:
    """Replace mentions and links with placeholders, drop GermEval |LBR| markers."""
    s = str(text)
    s = LBR_RE.sub(" ", s)
    s = URL_RE.sub(" URL ", s)
    s = MENTION_RE.sub("@USER", s)
    return re.sub(r"\s+", " ", s).strip()
