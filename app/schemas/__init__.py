from .analysis import AnalysisResult, AnalyzeIngredientsRequest, HealthProfile, IngredientInsight
from .auth import Token, UserCreate, UserResponse
from .chat import ChatMessage, ChatSessionResponse, SubmitMessageRequest, SubmitMessageResponse
from .dashboard import DashboardStats
from .history import HistoryDetail, HistoryItem

__all__ = [
    "AnalysisResult",
    "AnalyzeIngredientsRequest",
    "ChatMessage",
    "ChatSessionResponse",
    "DashboardStats",
    "HealthProfile",
    "HistoryDetail",
    "HistoryItem",
    "IngredientInsight",
    "SubmitMessageRequest",
    "SubmitMessageResponse",
    "Token",
    "UserCreate",
    "UserResponse",
]
