"""
Build an n-gram model from a corpus file and print what is inside:
table sizes, the busiest contexts with their Witten-Bell weights,
and a few sampled sentences.

    python scripts/inspect_model.py path/to/corpus.txt [order] [seed]
"""
import sys
from itertools import islice
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))
from config import ModelConfig
from corpus import read_sentences
from ngram_language_model import NGramLanguageModel

MAX_SAMPLE_TOKENS = 50

if len(sys.argv) < 2:
    print(f"usage: {sys.argv[0]} CORPUS [ORDER] [SEED]")
    sys.exit(1)

corpus_path = Path(sys.argv[1])
if not corpus_path.exists():
    print(f"ERROR: Corpus not found at {corpus_path}")
    sys.exit(1)

order = int(sys.argv[2]) if len(sys.argv) > 2 else 2
seed = int(sys.argv[3]) if len(sys.argv) > 3 else 0

sentences = read_sentences(corpus_path)
model = NGramLanguageModel(sentences, config=ModelConfig(order=order, seed=seed))

print(f"Sentences: {model.num_sentences}")
print(f"Vocabulary: {len(model.vocabulary)} (first 10: {list(model.vocabulary[:10])})")
for k in range(1, model.order):
    print(f"Contexts of length {k}: {len(model.context_counts(k))}")
print()

raw = model.context_counts(model.order - 1)
busiest = sorted(raw.items(), key=lambda kv: kv[1].total(), reverse=True)[:10]
print("Busiest contexts:")
for ctx, counter in busiest:
    weights = ", ".join(f"{w:.3f}" for w in model.smoothing_weights(ctx))
    print(f"  {' '.join(ctx):<30} seen={counter.total():<6.0f} distinct={counter.distinct_count():<5} weights=({weights})")
    print(f"    -> {counter.most_common(3)}")
print()

rng = np.random.default_rng(seed)
print("Sampled sentences (interpolated):")
for _ in range(5):
    tokens = list(islice(model.iter_generate(rng=rng), MAX_SAMPLE_TOKENS))
    print(f"  {' '.join(tokens)}")
print()

print("Sampled sentences (back-off):")
for _ in range(5):
    print(f"  {' '.join(model.generate_backoff_sentence(rng=rng))}")
