# api/offers.py
"""
Offers API
Read-only access to the loaded travel offers
"""

from typing import Dict, Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..retrieval.rag_service import RAGService
from ..utils.ai_helpers import destination_code
from .dependencies import get_rag


router = APIRouter(prefix="/api/offers", tags=["offers"])


def localize_offer(offer: Dict[str, Any], lang: str) -> Dict[str, Any]:
    """Copy of the offer with single-language convenience fields added"""

    def pick(section: Optional[Dict[str, Any]]):
        return (section or {}).get(lang) or []

    filtered = dict(offer)
    filtered["title"] = offer.get(f"title_{lang}") or ""
    filtered["validity_text"] = (offer.get("validity") or {}).get(lang) or ""
    filtered["includes"] = pick(offer.get("price_includes"))
    filtered["excludes"] = pick(offer.get("price_excludes"))
    filtered["visa"] = pick(offer.get("visa_requirements"))
    return filtered


@router.get("/destinations")
async def list_destinations(rag: RAGService = Depends(get_rag)):
    return {"destinations": rag.destinations()}


@router.get("/{dest}")
async def get_offer(
    dest: str,
    lang: str = Query("en", description="'ar' or 'en'; anything else means 'en'"),
    rag: RAGService = Depends(get_rag)
):
    dest = destination_code(dest)
    lang = "ar" if lang.lower() == "ar" else "en"

    offer = rag.get_offer_by_destination(dest)
    if not offer:
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "message": f"No offer for destination: {dest}"}
        )

    return {"dest": dest, "lang": lang, "offer": localize_offer(offer, lang)}
