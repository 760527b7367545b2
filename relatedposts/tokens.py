"""
Title tokenizer for mixed Chinese/Latin text.

Han runs are segmented into dictionary words with jieba; everything else,
including kana and Hangul, is split on whitespace and punctuation. Only
word-like segments survive, and all tokens are case-folded into a set.
"""

import logging
import re

import jieba

jieba.setLogLevel(logging.WARNING)

# Han ideographs (incl. extension A and compatibility). Kana and Hangul
# have no jieba dictionary and are matched as words by _LATIN_WORD.
_HAN_RUN = re.compile("([\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]+)")
_LATIN_WORD = re.compile(r"\w+(?:['’]\w+)*")


def is_word_like(segment: str) -> bool:
    return any(ch.isalnum() for ch in segment)


def segment(text: str) -> list:
    """Split text into word-like segments, preserving order and duplicates."""
    words = []
    for i, part in enumerate(_HAN_RUN.split(text)):
        if not part:
            continue
        # split() with one capture group puts Han runs at odd indices
        if i % 2 == 1:
            words.extend(w for w in jieba.lcut(part) if is_word_like(w))
        else:
            words.extend(_LATIN_WORD.findall(part))
    return words


def tokenize(title: str) -> frozenset:
    """Normalized token set of a title. Empty input gives an empty set."""
    if not title or not title.strip():
        return frozenset()
    return frozenset(w.casefold() for w in segment(title))
