"""
FastAPI backend for the interpolated n-gram sentence model.

Uses:
  - read_sentences to load a whitespace-tokenized corpus (one sentence per line)
  - NGramLanguageModel to score sentences and sample new ones with Witten-Bell
    interpolated bigram / trigram probabilities

Usage:
  1. Put the training corpus at backend/corpus.txt (or set NGRAM_CORPUS_PATH)
  2. Optionally put a config.json next to it (or set NGRAM_CONFIG_PATH), e.g.
     {"order": 3, "interpolation_weights": [0.5, 0.3, 0.2], "seed": 13}
  3. pip install -r requirements.txt
  4. cd backend && uvicorn main:app --reload --port 8000
"""

import asyncio
import json
import logging
import math
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import numpy as np
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sse_starlette.sse import EventSourceResponse

from config import ModelConfig
from corpus import read_sentences, tokenize
from ngram_language_model import ModelInvariantError, NGramLanguageModel

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Globals
# ---------------------------------------------------------------------------

BACKEND_DIR = Path(__file__).parent
CORPUS_PATH = Path(os.environ.get("NGRAM_CORPUS_PATH", BACKEND_DIR / "corpus.txt"))
CONFIG_PATH = Path(os.environ.get("NGRAM_CONFIG_PATH", BACKEND_DIR / "config.json"))

# seconds between streamed tokens
STREAM_DELAY = 0.05

model: Optional[NGramLanguageModel] = None

# unseen tokens scored since startup
unknown_word_events = 0


def build_model(corpus_path: Path, config_path: Path) -> NGramLanguageModel:
    config = ModelConfig.load(config_path)
    sentences = read_sentences(corpus_path)
    return NGramLanguageModel(sentences, config=config)


def load_model():
    """Train the model from the corpus on disk."""
    global model

    if not CORPUS_PATH.exists():
        logger.error("Corpus not found: %s", CORPUS_PATH)
        return

    # pydantic's ValidationError is a ValueError
    try:
        model = build_model(CORPUS_PATH, CONFIG_PATH)
    except (ValueError, ModelInvariantError) as e:
        logger.error("Could not build model: %s", e)
        return

    logger.info("Model ready: %r", model)
    logger.info("Fixed interpolation weights: %s", model.config.interpolation_weights)

    # show what the start context is expected to produce
    start_context = (model.start,) * (model.order - 1)
    top = model.conditional_distribution(model.order - 1).get_table(start_context).most_common(3)
    logger.info("Start context %s -> %s", start_context, top)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_model()
    yield


# ---------------------------------------------------------------------------
# App Setup
# ---------------------------------------------------------------------------

app = FastAPI(title="N-gram Sentence Model", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def require_model() -> NGramLanguageModel:
    if model is None:
        raise HTTPException(status_code=503, detail="Model not loaded. Check backend logs.")
    return model


def check_tokens(lm: NGramLanguageModel, tokens):
    reserved = [t for t in tokens if t in lm.config.reserved_symbols]
    if reserved:
        raise HTTPException(status_code=400, detail=f"Reserved tokens in input: {reserved}")


# ---------------------------------------------------------------------------
# Request schema
# ---------------------------------------------------------------------------

class ScoreRequest(BaseModel):
    sentence: str


class GenerateRequest(BaseModel):
    prefix: str = ""
    max_tokens: int = Field(default=200, ge=1, le=10_000)
    seed: Optional[int] = None


# ---------------------------------------------------------------------------
# Generation Logic  (sample -> stream token-by-token)
# ---------------------------------------------------------------------------

async def generate_tokens(lm: Optional[NGramLanguageModel], prefix_tokens, max_tokens: int, seed=None):
    """
    Stream sampled tokens as SSE events.

    The model's sampler has no length bound, so the stream is cut at max_tokens
    and the final ``done`` event reports whether that happened.
    """
    if lm is None:
        yield {
            "event": "error",
            "data": json.dumps({"error": "Model not loaded. Check backend logs."}),
        }
        return

    rng = np.random.default_rng(seed) if seed is not None else None

    count = 0
    truncated = False
    for token in lm.iter_generate(prefix_tokens, rng=rng):
        if count >= max_tokens:
            truncated = True
            logger.info("Generation stopped: hit max_tokens=%d", max_tokens)
            break
        yield {
            "event": "token",
            "data": json.dumps({"token": token}, ensure_ascii=False),
        }
        count += 1
        await asyncio.sleep(STREAM_DELAY)

    yield {"event": "done", "data": json.dumps({"tokens": count, "truncated": truncated})}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "model_loaded": model is not None,
        "order": model.order if model else None,
        "vocab_size": len(model.vocabulary) if model else 0,
        "sentences": model.num_sentences if model else 0,
    }


@app.get("/debug-model")
async def debug_model():
    """Inspect table sizes and a few of the busiest contexts."""
    lm = require_model()

    top_order = lm.order - 1
    raw = lm.context_counts(top_order)
    busiest = sorted(raw.items(), key=lambda kv: kv[1].total(), reverse=True)[:5]

    sample_contexts = []
    for ctx, counter in busiest:
        sample_contexts.append({
            "context": list(ctx),
            "top_next": counter.most_common(3),
            "distinct": counter.distinct_count(),
            "total": counter.total(),
            "weights": list(lm.smoothing_weights(ctx)),
        })

    return {
        "order": lm.order,
        "vocab_size": len(lm.vocabulary),
        "contexts": {str(k): len(lm.context_counts(k)) for k in range(1, lm.order)},
        "interpolation_weights": list(lm.config.interpolation_weights),
        "unknown_word_events": unknown_word_events,
        "sample_contexts": sample_contexts,
    }


@app.post("/score")
async def score(request: ScoreRequest):
    lm = require_model()
    tokens = tokenize(request.sentence)
    if not tokens:
        raise HTTPException(status_code=400, detail="Sentence cannot be empty.")
    check_tokens(lm, tokens)

    global unknown_word_events
    result = lm.score_sentence(tokens)
    unknown_word_events += len(result.unknown_words)

    log_prob = result.log_probability
    return {
        "tokens": tokens,
        "probability": result.probability,
        # JSON has no -inf
        "log_probability": log_prob if math.isfinite(log_prob) else None,
        "unknown_words": result.unknown_words,
    }


@app.post("/generate")
async def generate(request: GenerateRequest):
    """
    Sample a sentence, optionally continuing a prefix.
    Returns Server-Sent Events stream of tokens.
    """
    prefix_tokens = tokenize(request.prefix)
    if model is not None:
        check_tokens(model, prefix_tokens)

    return EventSourceResponse(
        generate_tokens(model, prefix_tokens, request.max_tokens, request.seed)
    )
