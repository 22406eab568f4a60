from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from auroapi.config import Settings
from auroapi.schemas.price import GoldQuote, PriceHistoryItem

logger = logging.getLogger(__name__)

UNAVAILABLE_TEXT = "Market analysis currently unavailable."
FALLBACK_TEXT = (
    "Our AI market analyst is currently analyzing high-frequency data. "
    "Please check back in a moment."
)

PROMPT_TEMPLATE = """
You are a senior financial analyst for Auro, a premium gold investment platform in Bangladesh.

Current Market Data (in BDT/Taka):
- Buy Price: ৳{buy} / gram
- Sell Price: ৳{sell} / gram
- Trend: {trend}

Recent Price History (Last few days):
{history}

Please provide a concise, professional market analysis (max 150 words).
Focus on whether now is a good time to buy or sell based on the trend.
Use a sophisticated, reassuring tone suitable for high-net-worth individuals.
Format the output with Markdown. Use bolding for key figures.
Remember to use the ৳ symbol for prices in your response.
"""


class MarketInsightService:
    """Gemini generateContent 기반 시장 코멘트 생성

    장애/키 누락/빈 응답 시에도 예외를 올리지 않고 고정 문구를 반환한다.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._base_url = settings.GEMINI_API_BASE_URL.rstrip("/")
        self._timeout = httpx.Timeout(settings.GEMINI_TIMEOUT_SECONDS, connect=5.0)
        self._api_key = settings.GEMINI_API_KEY
        self._model = settings.GEMINI_MODEL
        self._max_chars = settings.MARKET_INSIGHT_MAX_CHARS
        self._transport = transport  # 테스트에서 MockTransport 주입

    @staticmethod
    def build_prompt(quote: GoldQuote, history: List[PriceHistoryItem]) -> str:
        history_lines = "\n".join(
            f"{point.date.isoformat()}: ৳{point.price:.2f}" for point in history
        )
        return PROMPT_TEMPLATE.format(
            buy=f"{quote.buy:.2f}",
            sell=f"{quote.sell:.2f}",
            trend=quote.trend.value,
            history=history_lines,
        )

    async def generate(self, quote: GoldQuote, history: List[PriceHistoryItem]) -> str:
        if not self._api_key:
            logger.warning("GEMINI_API_KEY is not configured; returning fallback commentary")
            return FALLBACK_TEXT

        body = {"contents": [{"parts": [{"text": self.build_prompt(quote, history)}]}]}
        path = f"/v1beta/models/{self._model}:generateContent"

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    path, params={"key": self._api_key}, json=body
                )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Gemini request timed out: %s", exc)
            return FALLBACK_TEXT
        except httpx.HTTPStatusError as exc:
            logger.warning("Gemini returned HTTP %s", exc.response.status_code)
            return FALLBACK_TEXT
        except httpx.RequestError as exc:
            logger.warning("Gemini request error: %s", exc)
            return FALLBACK_TEXT
        except ValueError as exc:
            logger.error("Gemini response parse failed: %s", exc)
            return FALLBACK_TEXT

        text = self._extract_text(payload)
        if text is None:
            logger.error("Gemini response had an unexpected shape")
            return FALLBACK_TEXT
        if not text.strip():
            return UNAVAILABLE_TEXT
        return text.strip()[: self._max_chars]

    @staticmethod
    def _extract_text(payload: Dict[str, Any]) -> Optional[str]:
        """candidates[0].content.parts[*].text 를 이어 붙인다."""
        try:
            candidates = payload.get("candidates") or []
            if not candidates:
                return ""
            parts = candidates[0].get("content", {}).get("parts") or []
            return "".join(str(part.get("text", "")) for part in parts)
        except (AttributeError, TypeError):
            return None
