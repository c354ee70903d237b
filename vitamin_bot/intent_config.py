"""
Centralized configuration for intent classification and canned replies.

This module serves as the single source of truth for:
- Labelled training phrases for the intent classifier
- Keyword rules that override the classifier
- Quick action sets attached to replies
- Fixed reply templates and the assistant persona prompt
"""

from typing import Dict, List, Tuple

from .enums import Intent
from .models import QuickAction


# ─────────────────────────────────────────────────────────────
# Classifier training data
# ─────────────────────────────────────────────────────────────
TRAINING_DATA: List[Tuple[str, Intent]] = [
    # Product recommendations
    ("I need vitamin recommendations", Intent.PRODUCT_RECOMMENDATION),
    ("What vitamins should I take", Intent.PRODUCT_RECOMMENDATION),
    ("Help me find supplements", Intent.PRODUCT_RECOMMENDATION),
    ("I want to buy vitamins", Intent.PRODUCT_RECOMMENDATION),

    # Health questions
    ("What is vitamin D good for", Intent.HEALTH_INFORMATION),
    ("Benefits of vitamin C", Intent.HEALTH_INFORMATION),
    ("How much vitamin B12 should I take", Intent.HEALTH_INFORMATION),

    # Order support
    ("Track my order", Intent.ORDER_TRACKING),
    ("Where is my package", Intent.ORDER_TRACKING),
    ("Order status", Intent.ORDER_TRACKING),
    ("Delivery information", Intent.ORDER_TRACKING),

    # General support
    ("I need help", Intent.GENERAL_SUPPORT),
    ("Customer service", Intent.GENERAL_SUPPORT),
    ("Contact support", Intent.GENERAL_SUPPORT),

    # Product information
    ("Tell me about this product", Intent.PRODUCT_INFO),
    ("Product details", Intent.PRODUCT_INFO),
    ("Ingredients list", Intent.PRODUCT_INFO),

    # Pricing and availability
    ("How much does this cost", Intent.PRICING),
    ("Is this in stock", Intent.AVAILABILITY),
    ("Price information", Intent.PRICING),
]

# Checked in order after the classifier; first rule with a matching keyword wins
KEYWORD_RULES: List[Tuple[Tuple[str, ...], Intent]] = [
    (("track", "order", "delivery"), Intent.ORDER_TRACKING),
    (("recommend", "suggest", "what vitamin"), Intent.PRODUCT_RECOMMENDATION),
    (("price", "cost", "how much"), Intent.PRICING),
]

EMPTY_MESSAGE_INTENT = Intent.GENERAL_SUPPORT


# ─────────────────────────────────────────────────────────────
# Quick actions
# ─────────────────────────────────────────────────────────────
GOAL_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("💪 Energy & Vitality", "I want more energy and vitality"),
    QuickAction("🛡️ Immune Support", "I want to boost my immune system"),
    QuickAction("🦴 Bone Health", "I need vitamins for bone health"),
    QuickAction("❤️ Heart Health", "I want to support my heart health"),
]

RECOMMENDATION_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🛒 Browse Products", "Show me your vitamin products"),
    QuickAction("📋 Take Assessment", "I want to take a health assessment"),
]

HEALTH_TOPIC_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("💊 Vitamin D", "Tell me about Vitamin D"),
    QuickAction("🍊 Vitamin C", "Tell me about Vitamin C"),
    QuickAction("⚡ Vitamin B12", "Tell me about Vitamin B12"),
    QuickAction("🦴 Calcium", "Tell me about Calcium"),
]

ORDER_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Order Lookup", "Help me find my order"),
    QuickAction("📧 Contact Support", "I need help with my order"),
    QuickAction("📱 Account Login", "Help me log into my account"),
]

PRODUCT_INFO_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Browse All Products", "Show me all vitamin products"),
    QuickAction("⭐ Top Rated", "What are your best-selling vitamins?"),
    QuickAction("🆕 New Arrivals", "What new products do you have?"),
]

PRICING_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("💝 View Bundle Deals", "Show me bundle deals and discounts"),
    QuickAction("🚚 Shipping Info", "Tell me about shipping costs"),
    QuickAction("🔄 Subscription", "How does the subscription work?"),
]

AVAILABILITY_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("📋 Check Stock", "Check availability of specific products"),
    QuickAction("🔔 Notify Me", "Set up stock notifications"),
    QuickAction("⚡ Quick Ship", "Show me what ships today"),
]

CONVERSATION_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Get Recommendations", "I need vitamin recommendations"),
    QuickAction("📞 Customer Support", "I need help with my order"),
    QuickAction("❓ Ask About Vitamins", "I have a question about vitamins"),
]

LLM_ERROR_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Get Recommendations", "I need vitamin recommendations"),
    QuickAction("📚 Learn About Vitamins", "Tell me about vitamins"),
    QuickAction("🛒 Browse Products", "Show me your products"),
]

ERROR_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Get Recommendations", "I need vitamin recommendations"),
    QuickAction("📞 Contact Support", "I need to speak with a human"),
]

SOCKET_ERROR_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔄 Try Again", "Please try again"),
    QuickAction("📞 Contact Support", "I need human support"),
]

WELCOME_QUICK_ACTIONS: List[QuickAction] = [
    QuickAction("🔍 Get Recommendations", "I need vitamin recommendations"),
    QuickAction("📚 Learn About Vitamins", "Tell me about vitamins"),
    QuickAction("📦 Track My Order", "I want to track my order"),
]


# ─────────────────────────────────────────────────────────────
# Reply templates
# ─────────────────────────────────────────────────────────────
TEMPLATES: Dict[str, str] = {
    "recommendation_intro": "I'd be happy to help you find the right vitamins! ",
    "recommendation_questions": (
        "To give you the best recommendations, could you tell me:\n\n"
        "• What health goals do you have?\n"
        "• Are you looking for general wellness or specific support?\n"
        "• Any dietary restrictions I should know about?"
    ),
    "health_prompt": (
        "I'd be happy to provide health information! What specific vitamin, mineral, "
        "or health topic would you like to learn about?"
    ),
    "order_tracking": (
        "I can help you track your order! To provide accurate tracking information, I'll need "
        "your order number or the email address used for the purchase.\n\n"
        "You can also check your order status by:\n"
        "• Logging into your account\n"
        "• Checking your email for tracking updates\n"
        "• Using our order lookup tool"
    ),
    "product_info": (
        "I'd be happy to provide detailed product information! Which vitamin or supplement "
        "would you like to learn more about?\n\n"
        "I can provide details about:\n"
        "• Ingredients and dosage\n"
        "• Benefits and usage instructions\n"
        "• Quality certifications\n"
        "• Customer reviews and ratings"
    ),
    "pricing": (
        "I can help you with pricing information! Our vitamins are competitively priced with "
        "various options:\n\n"
        "💰 **Price Ranges:**\n"
        "• Single bottles: $15-$50\n"
        "• Bundle deals: Save 15-25%\n"
        "• Subscription: Additional 10% off\n"
        "• Free shipping on orders $35+\n\n"
        "Which specific products would you like pricing for?"
    ),
    "availability": (
        "Most of our vitamins are currently in stock and ready to ship! We update our inventory "
        "in real-time.\n\n"
        "📦 **Availability:**\n"
        "• 95% of products ship within 24 hours\n"
        "• Out-of-stock items show estimated restock dates\n"
        "• We offer back-in-stock notifications\n\n"
        "Which specific products are you interested in checking?"
    ),
    "conversation_fallback": (
        "I'm here to help with your vitamin and supplement needs! I can help you find products, "
        "answer questions about vitamins, or provide recommendations. What would you like to know?"
    ),
    "llm_error": "I'm here to help with your vitamin needs! How can I assist you today?",
    "error": "I'm sorry, I'm having trouble understanding right now. Could you please try again?",
    "socket_error": "I'm sorry, I encountered an error. Please try again.",
    "welcome": (
        "👋 Welcome to VitaStore! I'm here to help you find the perfect vitamins for your "
        "health goals. How can I assist you today?"
    ),
    "human_agent": (
        "I've notified our support team. A human agent will be with you shortly. "
        "Please stay connected."
    ),
}

SYSTEM_PROMPT = """You are VitaBot, a helpful and knowledgeable AI assistant for a vitamins and supplements store.
You should be friendly, informative, and helpful. Always try to guide conversations toward how you can help with vitamin recommendations, health information, or customer support.

Keep responses concise and actionable.

Current conversation context: {context}"""
