"""
Support responder: retrieval plus generation under a single deadline.
"""

from typing import Callable, Optional

from ..config.settings import Config
from ..utils.helpers import run_with_timeout
from ..utils.logging import get_logger
from .retriever import ContextRetriever

CompleteFn = Callable[[str, str, str], str]


class SupportResponder:
    """Answers customer questions from the site's content."""

    def __init__(self, retriever: ContextRetriever, complete_fn: CompleteFn, config: Config):
        """Initialize responder with a retriever and a completion function."""
        self.retriever = retriever
        self.complete_fn = complete_fn
        self.config = config
        self.logger = get_logger(__name__)

    def respond(self, query: str, timeout: Optional[float] = None) -> str:
        """Answer ``query``; raises ResponseTimeout if the deadline passes.

        Embedding and generation errors propagate unchanged so the caller can
        send its own fallback message.
        """
        if timeout is None:
            timeout = self.config.response_timeout

        answer = run_with_timeout(self._answer, timeout, query)
        return self.guard_response(answer)

    def _answer(self, query: str) -> str:
        context = self.retriever.retrieve(query)
        if not context:
            self.logger.info("No context retrieved; answering from the bare query")
        return self.complete_fn(self.config.system_prompt, context, query)

    def guard_response(self, answer: str) -> str:
        """Replace empty answers or answers with blocked phrases by the fallback."""
        lowered = answer.lower()
        if not answer.strip() or any(phrase.lower() in lowered for phrase in self.config.blocked_phrases):
            self.logger.info("Answer rejected by response guard; sending fallback answer")
            return self.config.fallback_answer
        return answer
