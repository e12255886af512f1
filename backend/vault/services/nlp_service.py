# Overview: Intent classifier that auto-answers client queries from a small fixed corpus.

"""
Intent Classifier

Trained once at startup on a fixed set of example phrases per intent; each
intent maps to one canned answer. A message is answered only when the best
intent's confidence is strictly above the threshold (0.7 by default).

Scoring signals (per training phrase, best phrase wins for its intent):
  - character sequence ratio (difflib.SequenceMatcher) on normalized text
  - token overlap F1 on normalized, lightly stemmed, stop-word-free tokens

Confidence = max of the two, in [0, 1].
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import SequenceMatcher

from flask import current_app


DEFAULT_CONFIDENCE_THRESHOLD = 0.7

TRAINING_CORPUS = {
    "product.inquiry": [
        "What products do you offer",
        "Tell me about your products",
        "What solutions do you provide",
        "Do you have software solutions",
    ],
    "service.inquiry": [
        "What services do you provide",
        "Tell me about your services",
        "Do you offer consulting",
        "Can you help with implementation",
    ],
    "pricing.inquiry": [
        "How much does it cost",
        "What are your prices",
        "Pricing information",
        "How much for your services",
    ],
    "support.inquiry": [
        "I need help with your product",
        "Technical support",
        "Something is not working",
        "Having issues with the software",
    ],
    "contact.inquiry": [
        "How can I contact you",
        "Contact information",
        "Email address",
        "Phone number",
    ],
}

ANSWERS = {
    "product.inquiry": (
        "We offer a range of enterprise software solutions including network security packages, "
        "cloud storage, and data analytics tools. Our sales team would be happy to provide you "
        "with more details."
    ),
    "service.inquiry": (
        "Our services include software implementation, IT consulting, managed services, and "
        "technical support. We tailor our offerings to meet your specific business needs."
    ),
    "pricing.inquiry": (
        "Our pricing varies based on the specific products and services you require. A member of "
        "our sales team will contact you shortly to provide a customized quote based on your needs."
    ),
    "support.inquiry": (
        "We're sorry to hear you're experiencing issues. Our technical support team will contact "
        "you shortly to help resolve your problem. In the meantime, you can check our online "
        "documentation at support.iwb.com."
    ),
    "contact.inquiry": (
        "You can reach our sales team at sales@iwb.com or call us at +1-800-IWB-HELP. Our office "
        "hours are Monday to Friday, 9 AM to 5 PM EST."
    ),
}

STOP_WORDS = {
    "a", "an", "the", "i", "me", "my", "you", "your", "we", "our", "it", "is", "are",
    "do", "does", "to", "of", "for", "with", "about", "can", "what", "how", "have",
    "having", "tell", "please", "and", "or", "in", "on", "there", "any",
}

_NON_WORD = re.compile(r"[^a-z0-9\s]+")


class ClassifierNotReadyError(RuntimeError):
    """generate_response() called before train()."""


@dataclass(frozen=True)
class Classification:
    intent: str | None
    confidence: float
    answer: str | None


def normalize(text: str) -> str:
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


def _stem(token: str) -> str:
    # prices / pricing / price -> pric
    for suffix in ("ing", "s"):
        if token.endswith(suffix) and len(token) - len(suffix) >= 3:
            token = token[: -len(suffix)]
            break
    if token.endswith("e") and len(token) > 3:
        token = token[:-1]
    return token


def tokenize(text: str) -> set[str]:
    return {_stem(t) for t in normalize(text).split() if t not in STOP_WORDS}


def _token_f1(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    common = len(a & b)
    return 2.0 * common / (len(a) + len(b))


def phrase_similarity(message: str, phrase: str) -> float:
    """Similarity in [0, 1] between two raw strings."""
    norm_message, norm_phrase = normalize(message), normalize(phrase)
    if not norm_message or not norm_phrase:
        return 0.0
    seq = SequenceMatcher(None, norm_message, norm_phrase).ratio()
    return max(seq, _token_f1(tokenize(message), tokenize(phrase)))


class IntentClassifier:
    def __init__(
        self,
        corpus: dict[str, list[str]] | None = None,
        answers: dict[str, str] | None = None,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ):
        self.corpus = corpus if corpus is not None else TRAINING_CORPUS
        self.answers = answers if answers is not None else ANSWERS
        self.threshold = threshold
        self._documents: list[tuple[str, str]] = []
        self.initialized = False

    def train(self) -> None:
        """Load the example phrases. Safe to call more than once."""
        documents = []
        for intent, phrases in self.corpus.items():
            if intent not in self.answers:
                raise ValueError(f"No answer defined for intent {intent}")
            for phrase in phrases:
                documents.append((intent, phrase))
        self._documents = documents
        self.initialized = True

    def classify(self, message: str) -> Classification:
        """Best intent for message with its confidence (never thresholded)."""
        if not self.initialized:
            raise ClassifierNotReadyError("Intent classifier not initialized")

        scores: dict[str, float] = {}
        for intent, phrase in self._documents:
            score = phrase_similarity(message, phrase)
            if score > scores.get(intent, 0.0):
                scores[intent] = score

        if not scores:
            return Classification(intent=None, confidence=0.0, answer=None)

        intent = max(scores, key=scores.get)
        return Classification(intent=intent, confidence=scores[intent], answer=self.answers[intent])

    def generate_response(self, message: str) -> str | None:
        """
        Canned answer when the top intent clears the threshold, else None.

        Classification errors are logged and reported as "no match" so the
        query falls back to pending.
        """
        if not self.initialized:
            raise ClassifierNotReadyError("Intent classifier not initialized")

        try:
            result = self.classify(message)
        except Exception:
            current_app.logger.exception("Error generating response")
            return None

        if result.intent and result.confidence > self.threshold:
            return result.answer
        return None


_EXTENSION_KEY = "vault.classifier"


def init_classifier(app) -> IntentClassifier:
    classifier = IntentClassifier(threshold=app.config.get("NLP_CONFIDENCE_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD))
    classifier.train()
    app.extensions[_EXTENSION_KEY] = classifier
    app.logger.info("Intent classifier trained on %d phrases", len(classifier._documents))
    return classifier


def get_classifier() -> IntentClassifier:
    return current_app.extensions[_EXTENSION_KEY]
