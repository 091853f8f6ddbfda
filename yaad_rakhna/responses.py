"""Spoken hi-IN responses.

Hindi verbs agree with the gender of the item ("चाबी रखी है" vs "चश्मा रखा है").
The feminine noun list comes from the vocabulary data; anything not on it is
treated as masculine.
"""

from __future__ import annotations

from .vocabulary import Vocabulary, default_vocabulary

ITEM_PLACEHOLDER = "चीज़"
DIRECT_ITEM_PLACEHOLDER = "कुछ"
LOCATION_PLACEHOLDER = "कहीं"

WELCOME = (
    "नमस्ते! मैं आपकी चीज़ें खोजने में मदद कर सकता हूँ। आप मुझसे अपनी चीज़ों को याद "
    "रखने के लिए कह सकते हैं, या मुझसे पूछ सकते हैं कि आपने कोई चीज़ कहां रखी थी।"
)
HELP = (
    'आप मुझसे अपनी चीज़ें याद रखने के लिए कह सकते हैं, जैसे "याद रखना", या आप पूछ सकते '
    'हैं "मेरी चाबी कहां है"। मैं आपको बताऊंगा कि आपने उन्हें कहां रखा था।'
)
GOODBYE = "अलविदा!"
NOT_UNDERSTOOD = (
    "क्षमा करें, मुझे समझ नहीं आया। आप मुझसे अपनी चीज़ें याद रखने के लिए कह सकते हैं, "
    "या पूछ सकते हैं कि आपने कोई चीज़ कहां रखी थी।"
)
APOLOGY = "क्षमा करें, कुछ गड़बड़ हो गई। कृपया बाद में पुनः प्रयास करें।"
ASK_ITEM_TO_STORE = "क्या याद रखना है?"
ASK_ITEM_TO_RETRIEVE = "क्या याद है?"
ASK_LOOKING_FOR = "आप क्या खोज रहे हैं?"
ITEM_UNCLEAR = "क्षमा करें, मुझे समझ नहीं आया कि आप किस वस्तु के बारे में पूछ रहे हैं।"
NOTHING_REMEMBERED = "मुझे अभी कुछ भी याद नहीं है।"
ALL_CLEARED = "ठीक है, मैंने सब कुछ भुला दिया है।"


class ResponseComposer:
    def __init__(self, vocabulary: Vocabulary | None = None) -> None:
        self.vocabulary = vocabulary or default_vocabulary()

    def is_feminine(self, item: str) -> bool:
        pattern = self.vocabulary.feminine_re
        return bool(pattern and pattern.search(item))

    def placed_present(self, item: str) -> str:
        return "रखी है" if self.is_feminine(item) else "रखा है"

    def placed_past(self, item: str) -> str:
        return "रखी थी" if self.is_feminine(item) else "रखा था"

    # Prompts ---------------------------------------------------------------

    def ask_location(self, item: str) -> str:
        return f"कहां रखा है {item}?"

    # Results ---------------------------------------------------------------

    def stored(self, item: str, location: str) -> str:
        return f"ठीक है, मैंने याद कर लिया है कि {item} {location} में {self.placed_present(item)}।"

    def found(self, item: str, location: str) -> str:
        return f"आपने {item} {location} में {self.placed_past(item)}।"

    def not_found(self, item: str) -> str:
        return f"मुझे याद नहीं है कि आपने {item} कहां रखा था। क्या आप मुझे बताना चाहेंगे?"

    def listing(self, items: dict[str, str]) -> str:
        if not items:
            return NOTHING_REMEMBERED
        parts = [f"{item} {location} में" for item, location in sorted(items.items())]
        return "मुझे याद है: " + ", ".join(parts) + "।"

    def reflect(self, intent_name: str) -> str:
        return f"आपने {intent_name} इंटेंट ट्रिगर किया है"
