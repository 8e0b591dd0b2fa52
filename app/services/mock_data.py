"""Offline mod: AI gateway yerine kullanılan sabit ürün analizleri (demo/fallback)."""
from types import MappingProxyType

from app.schemas.analysis import AnalysisResult, HealthProfile, IngredientInsight

MOCK_PRODUCTS = MappingProxyType({
    "chips": AnalysisResult(
        product_name="Classic Potato Chips",
        ingredients=["Potatoes", "Palm Oil", "Salt", "MSG", "Sugar"],
        insights=[
            IngredientInsight(
                name="Palm Oil",
                explanation="A vegetable oil derived from palm fruit, commonly used for frying.",
                health_impact="concern",
                impacts=[
                    "May raise LDL cholesterol levels",
                    "Contains saturated fats",
                    "Provides vitamin E and beta-carotene",
                ],
                tradeoffs=(
                    "While it provides some vitamins, the saturated fat content may outweigh benefits "
                    "for heart health. Moderate consumption suggested."
                ),
                alternatives=["Sunflower oil", "Olive oil", "Avocado oil"],
                confidence="high",
            ),
            IngredientInsight(
                name="MSG (Monosodium Glutamate)",
                explanation="A flavor enhancer that adds umami taste to foods.",
                health_impact="neutral",
                impacts=[
                    "Generally recognized as safe by FDA",
                    "Some people report sensitivity",
                    "Contains sodium",
                ],
                tradeoffs=(
                    "Despite myths, MSG is considered safe for most people. However, if you experience "
                    "headaches or flushing after eating MSG-containing foods, you may want to avoid it."
                ),
                alternatives=["Natural umami from tomatoes", "Mushroom extracts", "Yeast extracts"],
                confidence="high",
            ),
            IngredientInsight(
                name="Salt",
                explanation="Added for flavor and preservation.",
                health_impact="concern",
                impacts=[
                    "Excessive intake linked to high blood pressure",
                    "Essential mineral in moderation",
                    "May affect kidney function over time",
                ],
                tradeoffs=(
                    "Your body needs some sodium, but processed foods often contain excess amounts. "
                    "This product likely contributes significantly to daily sodium intake."
                ),
                confidence="high",
            ),
        ],
        summary=(
            "This snack contains several ingredients that warrant moderation, particularly for those "
            "watching sodium intake or heart health. The palm oil and added salt are the main concerns. "
            "Enjoy occasionally rather than daily."
        ),
        health_profile=HealthProfile(concerns=["heart health", "sodium intake"], inferred=True),
    ),
    "soda": AnalysisResult(
        product_name="Cola Beverage",
        ingredients=["Carbonated Water", "High Fructose Corn Syrup", "Caramel Color", "Phosphoric Acid", "Caffeine"],
        insights=[
            IngredientInsight(
                name="High Fructose Corn Syrup",
                explanation="A sweetener made from corn starch, commonly used in beverages.",
                health_impact="warning",
                impacts=[
                    "Linked to obesity when consumed in excess",
                    "May contribute to insulin resistance",
                    "No nutritional value beyond calories",
                    "Associated with increased diabetes risk",
                ],
                tradeoffs=(
                    "Provides sweetness at low cost but offers no nutritional benefits. For diabetics, "
                    "this is a significant concern as it causes rapid blood sugar spikes."
                ),
                alternatives=["Stevia-sweetened drinks", "Sparkling water with fruit", "Unsweetened tea"],
                confidence="high",
            ),
            IngredientInsight(
                name="Phosphoric Acid",
                explanation="Adds tartness and acts as a preservative.",
                health_impact="concern",
                impacts=[
                    "May affect calcium absorption",
                    "Linked to lower bone density in some studies",
                    "Can erode tooth enamel",
                ],
                tradeoffs=(
                    "While the amount in a single serving is small, regular consumption may affect "
                    "bone health over time."
                ),
                confidence="medium",
            ),
            IngredientInsight(
                name="Caffeine",
                explanation="A natural stimulant added for energy boost.",
                health_impact="neutral",
                impacts=[
                    "Can improve alertness and focus",
                    "May cause sleep issues if consumed late",
                    "Can be habit-forming",
                ],
                tradeoffs=(
                    "Moderate caffeine intake is generally safe for healthy adults, but those sensitive "
                    "to caffeine or with anxiety should limit intake."
                ),
                confidence="high",
            ),
        ],
        summary=(
            "This beverage is high in sugar and offers minimal nutritional value. For diabetics or those "
            "watching blood sugar, this is NOT recommended. The high fructose corn syrup will cause rapid "
            "glucose spikes."
        ),
        health_profile=HealthProfile(concerns=["diabetes", "weight management", "dental health"], inferred=True),
    ),
    "protein_bar": AnalysisResult(
        product_name="Protein Energy Bar",
        ingredients=["Whey Protein", "Almonds", "Honey", "Oats", "Dark Chocolate", "Sea Salt"],
        insights=[
            IngredientInsight(
                name="Whey Protein",
                explanation="A complete protein derived from milk during cheese production.",
                health_impact="positive",
                impacts=[
                    "Excellent source of essential amino acids",
                    "Supports muscle recovery and growth",
                    "May help with satiety and weight management",
                ],
                tradeoffs=(
                    "Great for most people, but those with dairy allergies or lactose intolerance should "
                    "avoid. Plant-based alternatives exist."
                ),
                alternatives=["Pea protein", "Hemp protein", "Brown rice protein"],
                confidence="high",
            ),
            IngredientInsight(
                name="Almonds",
                explanation="Tree nuts rich in healthy fats and nutrients.",
                health_impact="positive",
                impacts=[
                    "Heart-healthy monounsaturated fats",
                    "Good source of vitamin E and magnesium",
                    "May help lower cholesterol",
                ],
                tradeoffs="Calorie-dense, so portion control matters. Avoid if you have tree nut allergies.",
                confidence="high",
            ),
            IngredientInsight(
                name="Honey",
                explanation="Natural sweetener with some beneficial compounds.",
                health_impact="neutral",
                impacts=[
                    "Contains antioxidants",
                    "Still affects blood sugar",
                    "Slightly better than refined sugar",
                ],
                tradeoffs=(
                    "While more natural than refined sugar, honey still impacts blood sugar. Diabetics "
                    "should account for this in their carb count."
                ),
                confidence="high",
            ),
        ],
        summary=(
            "This is a relatively healthy snack option with quality protein and nutrients. The honey adds "
            "natural sweetness but diabetics should monitor portions. Good choice for post-workout or "
            "healthy snacking."
        ),
        health_profile=HealthProfile(concerns=["fitness", "protein intake", "healthy snacking"], inferred=True),
    ),
})

# Anahtar kelime -> mock ürün; ilk eşleşen kazanır
PRODUCT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("chips", ("chip", "crisp", "snack")),
    ("soda", ("soda", "cola", "drink", "beverage")),
    ("protein_bar", ("protein", "bar", "energy")),
)
DEFAULT_PRODUCT = "chips"


def get_mock_analysis(query: str) -> AnalysisResult:
    lower_query = (query or "").lower()
    for key, keywords in PRODUCT_KEYWORDS:
        if any(k in lower_query for k in keywords):
            return MOCK_PRODUCTS[key]
    return MOCK_PRODUCTS[DEFAULT_PRODUCT]
