"""Sağlık endişesi (concern) etiketleri.

Profil sayfasının katalog etiketleri ile dashboard öneri tablosu aynı kaynaktan beslenir;
offline mod için serbest metinden etiket çıkarımı da burada.
"""
from types import MappingProxyType
from typing import NamedTuple


class Concern(NamedTuple):
    id: str
    label: str
    description: str
    category: str


CATEGORY_LABELS = MappingProxyType({
    "dietary": "Dietary Preferences",
    "medical": "Medical Conditions",
    "lifestyle": "Lifestyle Goals",
})

CONCERN_CATALOG: tuple[Concern, ...] = (
    Concern("vegan", "Vegan", "No animal products", "dietary"),
    Concern("vegetarian", "Vegetarian", "No meat or fish", "dietary"),
    Concern("gluten-free", "Gluten-Free", "Celiac or gluten sensitivity", "dietary"),
    Concern("lactose-free", "Lactose-Free", "Dairy intolerance", "dietary"),
    Concern("keto", "Keto", "Low carb, high fat diet", "dietary"),
    Concern("diabetic", "Diabetic", "Blood sugar management", "medical"),
    Concern("heart-health", "Heart Health", "Cholesterol & blood pressure", "medical"),
    Concern("allergies", "Food Allergies", "Nuts, shellfish, etc.", "medical"),
    Concern("pregnancy", "Pregnancy", "Safe foods for pregnancy", "medical"),
    Concern("medications", "On Medications", "Drug-food interactions", "medical"),
    Concern("weight-loss", "Weight Loss", "Calorie conscious", "lifestyle"),
    Concern("muscle-building", "Muscle Building", "High protein focus", "lifestyle"),
    Concern("mental-wellness", "Mental Wellness", "Mood & cognitive health", "lifestyle"),
)

CONCERN_IDS = frozenset(c.id for c in CONCERN_CATALOG)

# Sorgu metninde geçen ifade -> endişe etiketi (sadece offline/mock mod)
CONCERN_PATTERNS = MappingProxyType({
    "diabetes": ("diabetic", "diabetes", "blood sugar", "glucose", "insulin"),
    "allergies": ("allergy", "allergic", "allergen", "intolerant", "intolerance"),
    "vegan": ("vegan", "plant-based", "animal-free", "no meat"),
    "vegetarian": ("vegetarian", "no meat"),
    "gluten": ("gluten", "celiac", "wheat-free"),
    "heart": ("heart", "cholesterol", "blood pressure", "cardiac"),
    "weight": ("weight", "diet", "calories", "low-cal", "losing weight"),
    "sodium": ("sodium", "salt", "low-sodium"),
})


def concerns_by_category() -> dict[str, list[Concern]]:
    grouped: dict[str, list[Concern]] = {key: [] for key in CATEGORY_LABELS}
    for concern in CONCERN_CATALOG:
        grouped[concern.category].append(concern)
    return grouped


def infer_health_concerns(query: str) -> list[str]:
    """
    Sorgudaki anahtar kelimelerden endişe etiketleri çıkarır (büyük/küçük harf duyarsız).
    Olumsuzluk çözümlenmez: "not diabetic" yine "diabetes" üretir.
    """
    lower_query = (query or "").lower()
    return [
        concern
        for concern, patterns in CONCERN_PATTERNS.items()
        if any(p in lower_query for p in patterns)
    ]
