import logging
import math
from typing import List, NamedTuple

import numpy as np

from config import ModelConfig
from frequency_table import ConditionalFrequencyTable, FrequencyTable
from smoothing import interpolation_weights

logger = logging.getLogger(__name__)


class ModelInvariantError(RuntimeError):
    """Raised when a freshly built model violates a table invariant."""


class SentenceScore(NamedTuple):
    probability: float
    log_probability: float
    unknown_words: List[str]


class NGramLanguageModel:
    """
    Interpolated bigram / trigram sentence model.

    Counts are accumulated once from the corpus and kept twice: normalized tables
    supply the probability mass, raw tables feed the Witten-Bell weights. Contexts are
    tuples of the preceding tokens, so ``_conditional[1]`` holds ``(w1,) -> w2`` and
    ``_conditional[2]`` holds ``(w1, w2) -> w3``.
    """

    def __init__(self, sentences, config: ModelConfig = None, rng=None):
        self.config = config if config is not None else ModelConfig()
        self.order = self.config.order
        self.start = self.config.start_symbol
        self.stop = self.config.stop_symbol
        self.unknown = self.config.unknown_symbol

        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self._unigram = FrequencyTable()
        self._unigram_raw = FrequencyTable()
        # history length -> ConditionalFrequencyTable
        self._conditional = {k: ConditionalFrequencyTable() for k in range(1, self.order)}
        self._conditional_raw = {k: ConditionalFrequencyTable() for k in range(1, self.order)}

        self.num_sentences = 0

        for sentence in sentences:
            self._accumulate(self._bracket(sentence))
            self.num_sentences += 1

        self._unigram.increment(self.unknown, 1.0)
        self._unigram_raw.increment(self.unknown, 1.0)

        self._normalize_distributions()
        self._check_invariants()

        logger.info(
            "Built order-%d model from %d sentences: %d word types, %s",
            self.order,
            self.num_sentences,
            len(self._unigram),
            ", ".join(f"{len(t)} contexts of length {k}" for k, t in self._conditional_raw.items()),
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _check_tokens(self, tokens):
        reserved = self.config.reserved_symbols
        for tok in tokens:
            if tok in reserved:
                raise ValueError(f"token {tok!r} is a reserved sentinel symbol")

    def _bracket(self, sentence):
        tokens = list(sentence)
        self._check_tokens(tokens)
        return [self.start] * (self.order - 1) + tokens + [self.stop]

    def _accumulate(self, padded):
        for i in range(self.order - 1, len(padded)):
            word = padded[i]
            self._unigram.increment(word, 1.0)
            self._unigram_raw.increment(word, 1.0)
            for k in range(1, self.order):
                context = tuple(padded[i - k:i])
                self._conditional[k].increment(context, word, 1.0)
                self._conditional_raw[k].increment(context, word, 1.0)

    def _normalize_distributions(self):
        for table in self._conditional.values():
            table.normalize_all()
        self._unigram.normalize()

    def _check_invariants(self):
        if self._unigram_raw.total() <= 0 or self._unigram.get(self.unknown) <= 0:
            raise ModelInvariantError("unigram table has no mass after unknown-word seeding")
        for k, table in self._conditional_raw.items():
            for context, continuations in table.items():
                if continuations.distinct_count() == 0:
                    raise ModelInvariantError(
                        f"context {context!r} of length {k} has no continuations"
                    )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def vocabulary(self):
        """Unigram vocabulary in first-seen order (stop and unknown symbols included)."""
        return tuple(self._unigram.keys())

    @property
    def unigram_counts(self) -> FrequencyTable:
        return self._unigram_raw

    @property
    def unigram_distribution(self) -> FrequencyTable:
        return self._unigram

    def context_counts(self, history_length: int) -> ConditionalFrequencyTable:
        return self._conditional_raw[history_length]

    def conditional_distribution(self, history_length: int) -> ConditionalFrequencyTable:
        return self._conditional[history_length]

    # ------------------------------------------------------------------
    # Probabilities
    # ------------------------------------------------------------------

    def _as_context(self, context):
        context = tuple(context)
        if len(context) != self.order - 1:
            raise ValueError(
                f"order-{self.order} model needs a context of {self.order - 1} tokens, got {context!r}"
            )
        return context

    def smoothing_weights(self, context):
        """Witten-Bell weights for ``context``, highest order first, unigram last."""
        context = self._as_context(context)
        tables = [
            self._conditional_raw[k].get_table(context[-k:])
            for k in range(self.order - 1, 0, -1)
        ]
        return interpolation_weights(tables)

    def _unigram_probability(self, word):
        p = self._unigram.get(word)
        if p == 0.0:
            logger.info("Unknown word: %s", word)
            p = self._unigram.get(self.unknown)
        return p

    def _interpolate(self, context, word, weights):
        probs = [self._conditional[k].get(context[-k:], word) for k in range(self.order - 1, 0, -1)]
        probs.append(self._unigram_probability(word))
        return sum(w * p for w, p in zip(weights, probs))

    def conditional_probability(self, context, word, smoothed: bool = True) -> float:
        """P(word | context) interpolated across all orders of the model."""
        context = self._as_context(context)
        if smoothed:
            weights = self.smoothing_weights(context)
        else:
            weights = self.config.interpolation_weights
        return self._interpolate(context, word, weights)

    def bigram_probability(self, previous_word, word, smoothed: bool = True) -> float:
        return self.conditional_probability((previous_word,), word, smoothed)

    def trigram_probability(self, pre_previous_word, previous_word, word, smoothed: bool = True) -> float:
        return self.conditional_probability((pre_previous_word, previous_word), word, smoothed)

    def _windows(self, sentence):
        padded = self._bracket(sentence)
        n = self.order
        for i in range(n - 1, len(padded)):
            yield tuple(padded[i - n + 1:i]), padded[i]

    def score_sentence(self, sentence) -> SentenceScore:
        """
        Score ``sentence`` in a single pass over its windows.

        Returns the probability, its natural log (``-inf`` when some factor is zero)
        and the scored tokens that were never seen in training, in sentence order.
        """
        probability = 1.0
        log_prob = 0.0
        unknown_words = []
        for context, word in self._windows(sentence):
            if word not in self._unigram:
                unknown_words.append(word)
            p = self.conditional_probability(context, word, smoothed=True)
            probability *= p
            if p > 0.0:
                log_prob += math.log(p)
            else:
                log_prob = -math.inf
        return SentenceScore(probability, log_prob, unknown_words)

    def sentence_probability(self, sentence) -> float:
        return self.score_sentence(sentence).probability

    def sentence_log_probability(self, sentence) -> float:
        return self.score_sentence(sentence).log_probability

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _sample_word(self, context, rng):
        weights = self.smoothing_weights(context)
        sample = rng.random()
        cumulative = 0.0
        for word in self._unigram.keys():
            cumulative += self._interpolate(context, word, weights)
            if cumulative > sample:
                return word
        return self.unknown

    def iter_generate(self, prefix=(), rng=None):
        """
        Lazily yield sampled tokens until the stop symbol is drawn.

        The stream has no length bound of its own; wrap it in ``itertools.islice``
        when one is needed. ``prefix`` tokens seed the context but are not yielded.
        """
        rng = self.rng if rng is None else rng
        prefix = list(prefix)
        self._check_tokens(prefix)

        history = [self.start] * (self.order - 1) + prefix
        context = tuple(history[len(history) - (self.order - 1):])
        while True:
            word = self._sample_word(context, rng)
            if word == self.stop:
                return
            yield word
            context = context[1:] + (word,)

    def generate_sentence(self, rng=None):
        return list(self.iter_generate(rng=rng))

    def _backoff_word(self, context, rng):
        # uniform over continuations actually seen after the longest known history
        for k in range(self.order - 1, 0, -1):
            continuations = self._conditional_raw[k].get_table(context[-k:])
            if len(continuations):
                keys = list(continuations.keys())
                return keys[int(rng.integers(len(keys)))]

        sample = rng.random()
        cumulative = 0.0
        for word, p in self._unigram.items():
            cumulative += p
            if cumulative > sample:
                return word
        return self.unknown

    def generate_backoff_sentence(self, rng=None):
        """Sample by picking uniformly among observed continuations, backing off on unseen histories."""
        rng = self.rng if rng is None else rng
        context = (self.start,) * (self.order - 1)
        sentence = []
        while True:
            word = self._backoff_word(context, rng)
            if word == self.stop:
                return sentence
            sentence.append(word)
            context = context[1:] + (word,)

    def __repr__(self):
        return (
            f"NGramLanguageModel(order={self.order}, sentences={self.num_sentences}, "
            f"vocabulary={len(self._unigram)})"
        )
