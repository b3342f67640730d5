import pytest

from config import ModelConfig
from ngram_language_model import NGramLanguageModel

TOY_CORPUS = [
    ["the", "cat", "sat"],
    ["the", "dog", "ran"],
]

LARGER_CORPUS = [
    ["the", "cat", "sat", "on", "the", "mat"],
    ["the", "dog", "sat", "on", "the", "log"],
    ["a", "cat", "ran", "after", "the", "dog"],
    ["the", "dog", "ran", "away"],
    ["a", "bird", "sang"],
]


@pytest.fixture
def bigram_model():
    return NGramLanguageModel(TOY_CORPUS, config=ModelConfig(order=2, seed=7))


@pytest.fixture
def trigram_model():
    return NGramLanguageModel(TOY_CORPUS, config=ModelConfig(order=3, seed=7))


@pytest.fixture(params=[2, 3], ids=["bigram", "trigram"])
def larger_model(request):
    return NGramLanguageModel(LARGER_CORPUS, config=ModelConfig(order=request.param, seed=11))
