"""
Rewrite Providers
=================
The oracle boundary: one call in, one structured payload out.

A provider takes a system instruction, a JSON-schema-like description of
the expected payload, and the user content, and returns:

    {"paraphrasedText": "...", "changes": [{"original", "paraphrased",
     "type", "startIndex", "endIndex"}, ...]}

Any text-generation backend can sit behind `RewriteProvider`.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import structlog
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from pydantic import BaseModel, Field, ValidationError

from pipeline.errors import OracleError, OracleFailure, classify_oracle_error
from pipeline.llm import get_llm

logger = structlog.get_logger(__name__)


class OracleChange(BaseModel):
    """One change as reported by the oracle."""
    
    original: str = ""
    paraphrased: str = ""
    type: str = ""
    # Models sometimes send 12.0 for an offset
    startIndex: float = Field(0, allow_inf_nan=False)
    endIndex: Optional[float] = Field(None, allow_inf_nan=False)


class OracleResponse(BaseModel):
    """The oracle's structured payload."""
    
    paraphrasedText: str
    changes: List[OracleChange] = Field(default_factory=list)


def parse_oracle_payload(payload: Any) -> OracleResponse:
    """
    Validate the oracle's payload.
    
    Raises:
        OracleFailure: if the payload is missing or has the wrong shape
    """
    if not payload:
        raise OracleFailure("Paraphrasing failed: empty response from the model")
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise OracleFailure(f"Paraphrasing failed: response is not JSON ({e})") from e
    try:
        return OracleResponse.model_validate(payload)
    except ValidationError as e:
        raise OracleFailure(f"Paraphrasing failed: malformed response ({e.error_count()} errors)") from e


class RewriteProvider(ABC):
    """Something that can rewrite text according to an instruction."""
    
    @abstractmethod
    async def rewrite(
        self,
        system_instruction: str,
        response_schema: Dict[str, Any],
        user_content: str,
    ) -> Dict[str, Any]:
        """Run one rewrite and return the raw structured payload."""
        ...


class LangChainRewriteProvider(RewriteProvider):
    """
    Rewrite provider backed by a LangChain chat model.
    
    The model is created on first use, so a missing API key surfaces as
    an auth failure on the first request instead of breaking startup.
    """
    
    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        provider: Optional[str] = None,
        temperature: float = 0.3,
    ):
        self._llm = llm
        self.provider = provider
        self.temperature = temperature
    
    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_llm(provider=self.provider, temperature=self.temperature)
        return self._llm
    
    async def rewrite(
        self,
        system_instruction: str,
        response_schema: Dict[str, Any],
        user_content: str,
    ) -> Dict[str, Any]:
        messages = [
            SystemMessage(
                content=f"{system_instruction}\n\nJSON schema of the response:\n"
                f"{json.dumps(response_schema)}"
            ),
            HumanMessage(content=user_content),
        ]
        
        try:
            chain = self.llm | JsonOutputParser()
            return await chain.ainvoke(messages)
        except OracleError:
            raise
        except OutputParserException as e:
            # The message echoes the model output, so it is never keyword-classified
            logger.error("Oracle returned malformed output", provider=self.provider)
            raise OracleFailure("Paraphrasing failed: response is not JSON") from e
        except Exception as e:
            error = classify_oracle_error(e)
            logger.error(
                "Oracle call failed",
                provider=self.provider,
                error_type=type(error).__name__,
                error=str(e),
            )
            raise error from e
