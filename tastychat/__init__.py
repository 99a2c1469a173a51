"""tastychat - conversational support engine for the Tasty Food chatbot."""

__version__ = "0.1.0"
