# retrieval/tour_service.py
"""
Tour Service
Offer-level helpers on top of RAGService: tours, package contents,
top hotels, budget filtering, price totals and list formatting.
"""

from typing import Dict, Any, Optional, List, Union

from ..schemas.ai_schemas import Language, RAGChunk
from .rag_service import RAGService, hotel_display_name, hotel_price, hotel_rating

DEFAULT_LIST_LIMIT = 3
TOUR_DESC_MAX = 80


def _lang(lang: Union[Language, str]) -> str:
    return getattr(lang, "value", lang)


class TourService:
    """Thin domain layer; holds no state beyond its RAGService"""

    def __init__(self, rag: RAGService):
        self.rag = rag

    def get_destinations(self) -> List[str]:
        return self.rag.destinations()

    def get_tours(self, destination: str, lang: Union[Language, str] = Language.AR) -> List[Dict[str, Any]]:
        chunks = self.rag.get_destination_info(destination, "tours", lang)
        tours: List[Dict[str, Any]] = []
        for chunk in chunks:
            if chunk.metadata and chunk.metadata.tours:
                tours.extend(chunk.metadata.tours)
        return tours

    def get_visa_requirements(self, destination: str, lang: Union[Language, str] = Language.AR) -> List[RAGChunk]:
        return self.rag.get_destination_info(destination, "visa", lang)

    def get_package_includes(self, destination: str, lang: Union[Language, str] = Language.AR) -> List[RAGChunk]:
        return self.rag.get_destination_info(destination, "includes", lang)

    def get_package_excludes(self, destination: str, lang: Union[Language, str] = Language.AR) -> List[RAGChunk]:
        return self.rag.get_destination_info(destination, "excludes", lang)

    def get_hotel_by_name(self, destination: str, hotel_name: str) -> Optional[Dict[str, Any]]:
        needle = hotel_name.lower()
        for hotel in self.rag.search_hotels(destination):
            names = [hotel_display_name(hotel, "en"), hotel_display_name(hotel, "ar")]
            if any(needle in name.lower() for name in names):
                return hotel
        return None

    def get_top_hotels(self, destination: str, limit: int = DEFAULT_LIST_LIMIT, sort_by: str = "rating") -> List[Dict[str, Any]]:
        """Best-rated first, or cheapest first with sort_by="price" """
        hotels = self.rag.search_hotels(destination)
        if sort_by == "price":
            hotels = sorted(hotels, key=lambda h: hotel_price(h) or 0)
        else:
            hotels = sorted(hotels, key=hotel_rating, reverse=True)
        return hotels[:limit]

    def get_hotels_by_budget(self, destination: str, min_budget: Optional[float] = None,
                             max_budget: Optional[float] = None) -> List[Dict[str, Any]]:
        result = []
        for hotel in self.rag.search_hotels(destination):
            price = hotel_price(hotel) or 0
            if min_budget and price < min_budget:
                continue
            if max_budget and price > max_budget:
                continue
            result.append(hotel)
        return result

    def get_hotels_by_rating(self, destination: str, min_rating: int) -> List[Dict[str, Any]]:
        return self.rag.search_hotels(destination, {"min_rating": min_rating})

    @staticmethod
    def calculate_total_price(price_per_person: float, travelers: int,
                              optional_tours: Optional[List[float]] = None) -> float:
        hotel_total = price_per_person * travelers
        tours_total = sum(optional_tours or []) * travelers
        return hotel_total + tours_total

    # ------------------------------------------
    # Formatting
    # ------------------------------------------

    def format_hotels_list(self, hotels: List[Dict[str, Any]], lang: Union[Language, str] = Language.AR,
                           travelers: int = 1, limit: int = DEFAULT_LIST_LIMIT) -> str:
        lang = _lang(lang)
        shown = hotels[:limit]
        remaining = len(hotels) - limit

        header = "🏨 **الفنادق المتاحة:**\n\n" if lang == "ar" else "🏨 **Available Hotels:**\n\n"

        lines = []
        for index, hotel in enumerate(shown, start=1):
            name = hotel_display_name(hotel, lang) or "Unknown"
            stars = hotel_rating(hotel)
            rating = f" {stars}⭐" if stars else ""
            area = f" - {hotel['area']}" if hotel.get("area") else ""
            price = hotel_price(hotel) or 0
            total = price * travelers
            if lang == "ar":
                lines.append(f"{index}. **{name}**{rating}{area}\n   💰 {price:g} جنيه/شخص (المجموع: {total:g} جنيه)")
            else:
                lines.append(f"{index}. **{name}**{rating}{area}\n   💰 {price:g} EGP/person (Total: {total:g} EGP)")

        footer = ""
        if remaining > 0:
            footer = (
                f"\n\n💡 *لدينا {remaining} فندق آخر. عايز تشوف المزيد؟*" if lang == "ar"
                else f"\n\n💡 *We have {remaining} more hotels. Want to see more?*"
            )

        return header + "\n\n".join(lines) + footer

    def format_tours_list(self, tours: List[Dict[str, Any]], lang: Union[Language, str] = Language.AR,
                          limit: int = DEFAULT_LIST_LIMIT) -> str:
        lang = _lang(lang)
        shown = tours[:limit]
        remaining = len(tours) - limit

        header = "🎯 **الجولات الاختيارية:**\n\n" if lang == "ar" else "🎯 **Optional Tours:**\n\n"

        lines = []
        for index, tour in enumerate(shown, start=1):
            if lang == "ar":
                name = tour.get("name_ar") or tour.get("name_en") or ""
                desc = tour.get("description_ar") or tour.get("description_en") or ""
                price = f" - ${tour['price_usd']}/شخص" if tour.get("price_usd") else ""
            else:
                name = tour.get("name_en") or tour.get("name_ar") or ""
                desc = tour.get("description_en") or tour.get("description_ar") or ""
                price = f" - ${tour['price_usd']}/person" if tour.get("price_usd") else ""
            if len(desc) > TOUR_DESC_MAX:
                desc = desc[:TOUR_DESC_MAX] + "..."
            lines.append(f"{index}. **{name}**{price}\n   {desc}")

        footer = ""
        if remaining > 0:
            footer = (
                f"\n\n💡 *لدينا {remaining} جولة أخرى. عايز تشوف المزيد؟*" if lang == "ar"
                else f"\n\n💡 *We have {remaining} more tours. Want to see more?*"
            )

        return header + "\n\n".join(lines) + footer
