"""
generation/summarizer.py
Document Summarizer using LangChain.

Chain:
  PromptTemplate | chat model | StrOutputParser

Without a provider, or when the provider fails, an extractive summary of
the first three substantial sentences is returned instead.
"""
import re
from typing import Optional

from generation.prompts import SUMMARY_TEMPLATE
from generation.providers import ProviderHandle, ProviderRegistry, classify_provider_error
from monitoring import PROVIDER_FAILURES, get_logger

log = get_logger(__name__)

# Long documents are truncated before being sent to the model
MAX_PROMPT_CHARS = 12000
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def extractive_summary(content: str, sentences: int = 3) -> str:
    picked = [s.strip() for s in _SENTENCE_SPLIT.split(content) if len(s.strip()) > 20][:sentences]
    if not picked:
        return "Document processed successfully."
    return ". ".join(" ".join(s.split()) for s in picked) + "."


class DocumentSummarizer:

    def __init__(self, registry: Optional[ProviderRegistry] = None) -> None:
        self._registry = registry or ProviderRegistry()

    @staticmethod
    def _build_chain(handle: ProviderHandle):
        """StrOutputParser extracts the plain string from AIMessage.content."""
        from langchain_core.output_parsers import StrOutputParser
        from langchain_core.prompts import PromptTemplate

        prompt = PromptTemplate(
            template=SUMMARY_TEMPLATE,
            input_variables=["document_type", "content"],
        )
        return prompt | handle.model | StrOutputParser()

    def summarize(self, content: str, document_type: str = "general_maritime") -> str:
        handle = self._registry.current()
        if handle is None:
            return extractive_summary(content)

        try:
            summary = self._build_chain(handle).invoke({
                "document_type": document_type.replace("_", " "),
                "content":       content[:MAX_PROMPT_CHARS],
            })
        except Exception as exc:
            kind = classify_provider_error(exc)
            PROVIDER_FAILURES.labels(operation="summarize", kind=kind).inc()
            log.warning("LLM summary failed, using extractive summary", kind=kind)
            return extractive_summary(content)

        summary = (summary or "").strip()
        return summary or extractive_summary(content)
