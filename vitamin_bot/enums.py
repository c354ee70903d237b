# vitamin_bot/enums.py
from enum import Enum


class Intent(str, Enum):
    # Labels the trained classifier can produce
    PRODUCT_RECOMMENDATION = "product_recommendation"
    HEALTH_INFORMATION = "health_information"
    ORDER_TRACKING = "order_tracking"
    GENERAL_SUPPORT = "general_support"
    PRODUCT_INFO = "product_info"
    PRICING = "pricing"
    AVAILABILITY = "availability"

    # Produced by the engine itself
    GENERAL_CONVERSATION = "general_conversation"
    ERROR = "error"
    WELCOME = "welcome"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    ESCALATED = "escalated"


class ProductCategory(str, Enum):
    VITAMINS = "vitamins"
    MINERALS = "minerals"
    SUPPLEMENTS = "supplements"
    MULTIVITAMINS = "multivitamins"
    PROBIOTICS = "probiotics"
    PREBIOTICS = "prebiotics"
    HERBS = "herbs"


class InventoryStatus(str, Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    DISCONTINUED = "discontinued"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very-active"


class CommunicationMethod(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PHONE = "phone"
    CHAT = "chat"


class RecommendationFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    NEVER = "never"


class KnowledgeCategory(str, Enum):
    VITAMIN = "vitamin"
    MINERAL = "mineral"
    SUPPLEMENT = "supplement"
    CONDITION = "condition"
    GENERAL = "general"


def enum_values(enum_cls) -> set:
    return {member.value for member in enum_cls}
