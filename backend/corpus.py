import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def tokenize(text: str):
    return text.split()


def read_sentences(path):
    """One sentence per non-blank line, tokens separated by whitespace."""
    path = Path(path)
    sentences = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            tokens = tokenize(line)
            if tokens:
                sentences.append(tokens)
    logger.info("Read %d sentences from %s", len(sentences), path)
    return sentences
