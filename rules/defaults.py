"""
Built-in Rule Tables
====================

Two tables ship with the responder:

- classic: regular expressions with captures, ending in a catch-all
- keyword: plain keyword spotting with no catch-all, so unmatched
  input gets the engine's fallback reply
"""

from core.exceptions import ConfigError
from .table import Rule, RuleTable


CLASSIC_TABLE = RuleTable.of(
    Rule.from_regex(r"^\s*I need ([^.!?]*)[.!?]*\s*$", [
        "What makes you feel that you need $1?",
        "Why do you believe $1 would help you?",
        "Do you think getting $1 will solve your issue?",
    ], name="need"),
    Rule.from_regex(r"^\s*Why do I feel ([^.!?]*)[.!?\s]*$", [
        "What do you think is causing these feelings of $1?",
        "Have you felt $1 before? Why now?",
        "Why do you think you're feeling $1 at the moment?",
    ], name="why-feel"),
    Rule.from_regex(r".*\bfriend\b.*", [
        "Tell me more about your friendship.",
        "How do you feel about your friends?",
        "Are there particular friends who make you feel this way?",
    ], name="friend"),
    Rule.from_regex(r"^\s*(?:I am|I'm) ([^.!?]*)[.!?\s]*$", [
        "How long have you been feeling $1?",
        "What do you think causes you to feel $1?",
        "Have you tried anything to feel less $1?",
    ], name="i-am"),
    Rule.from_regex(r"^\s*Are you\b([^.!?]*)[.!?\s]*$", [
        "Would it change things if I were $1?",
        "Why are you curious if I'm $1?",
        "Does my identity as $1 matter to you?",
    ], name="are-you"),
    Rule.from_regex(r"^\s*What should I ([^.!?]*)[.!?\s]*$", [
        "Why are you unsure if you should $1?",
        "What would it mean for you to $1?",
        "What do you think will happen if you decide to $1?",
    ], name="what-should"),
    Rule.from_regex(r"^\s*How .*", [
        "How would you feel if you were me?",
        "What do you think?",
        "Perhaps you already know the answer.",
    ], name="how"),
    Rule.from_regex(r"^\s*I don't know\b.*$", [
        "Why do you feel uncertain?",
        "Can you elaborate on why you don’t know?",
        "What do you think would help you find an answer?",
    ], name="dont-know"),
    Rule.from_regex(r".*family.*", [
        "How does your family affect your feelings?",
        "What is it about your family that stands out?",
        "What role does family play in your life?",
    ], name="family"),
    Rule.from_regex(r"^\s*Can you ([^.!?]*)[.!?\s]*$", [
        "What kind of help do you need with $1?",
        "What makes you think I could assist you with $1?",
        "How would you like me to help you?",
    ], name="can-you"),
    Rule.from_regex(r"^\s*(Hello|Hi)\b.*$", [
        "Hi there! How can I assist you today?",
        "Hello! What’s on your mind?",
        "Hey! How’s it going?",
    ], name="greeting"),
    Rule.from_regex(r"^.*$", [
        "Please tell me more about that.",
        "Let's explore this further.",
        "I'm here to listen; please go on.",
        "That’s interesting. Can you expand on that?",
    ], name="catch-all"),
)


_KEYWORDS = [
    ("sorry", ["No need to apologize.", "It's okay, please go on."]),
    ("mother", [
        "Tell me more about your mother.",
        "How do you feel about your mother?",
        "What comes to mind when you think about your mother?",
    ]),
    ("father", [
        "How does your relationship with your father make you feel?",
        "Please tell me more about your father.",
    ]),
    ("family", [
        "Tell me more about your family.",
        "How do you feel about your family?",
        "Does anyone in your family stand out to you?",
    ]),
    ("feel", [
        "Why do you feel that way?",
        "Do you often feel this way?",
        "What do these feelings make you think about?",
    ]),
    ("sad", [
        "I'm sorry to hear that. What do you think is causing these feelings?",
        "Tell me more about what's making you feel sad.",
    ]),
    ("happy", [
        "What’s making you feel happy?",
        "How long have you felt this way?",
        "Do you feel this way often?",
    ]),
    ("angry", [
        "Why do you feel angry?",
        "Tell me more about what’s making you angry.",
        "What usually helps when you feel angry?",
    ]),
    # The later of two "friend" entries wins, in the earlier position
    ("friend", [
        "Tell me about your friends.",
        "What’s something you appreciate about your friends?",
        "How do your friends make you feel?",
    ]),
    ("relationship", [
        "What is important to you in a relationship?",
        "How do you feel about your relationships?",
        "What does a good relationship look like to you?",
    ]),
    ("help", [
        "How can I help you?",
        "What do you need help with?",
        "I’m here to help. What’s on your mind?",
    ]),
    ("why", [
        "Why do you ask?",
        "Can you explain why that’s on your mind?",
        "What do you think the reason is?",
    ]),
    ("because", [
        "Is that the only reason?",
        "Can you think of other reasons?",
        "What led you to feel that way?",
    ]),
    ("think", [
        "What makes you think that?",
        "Why do you think so?",
        "Do you often think about this?",
    ]),
    ("yes", [
        "I see. Can you tell me more?",
        "Why do you say yes?",
        "Can you elaborate on that?",
    ]),
    ("no", [
        "Why do you say no?",
        "What makes you feel that way?",
        "Is there a reason you disagree?",
    ]),
    ("dream", [
        "What did you dream about?",
        "How did the dream make you feel?",
        "Do you often remember your dreams?",
    ]),
    ("life", [
        "What about your life would you like to discuss?",
        "Tell me more about your life.",
        "How do you feel about your life at the moment?",
    ]),
    ("work", [
        "How do you feel about your work?",
        "What kind of work do you do?",
        "Is work something that’s on your mind a lot?",
    ]),
    ("anxious", [
        "What is making you feel anxious?",
        "How long have you been feeling this way?",
        "Does talking about it help?",
    ]),
    ("fear", [
        "What are you afraid of?",
        "Why does that cause you fear?",
        "Have you felt this fear before?",
    ]),
    ("love", [
        "Who or what do you love?",
        "How does love make you feel?",
        "Can you describe what love means to you?",
    ]),
    ("hate", [
        "What makes you feel that way?",
        "Why do you feel hatred?",
        "Have you felt this way for a long time?",
    ]),
    ("bored", [
        "What usually makes you feel better?",
        "Why do you feel bored?",
        "What do you wish you were doing instead?",
    ]),
    ("alone", [
        "Do you often feel alone?",
        "What does being alone mean to you?",
        "Would you like to talk more about this feeling?",
    ]),
    ("can you", [
        "What would you like me to do?",
        "What do you need help with?",
        "I’m here to listen.",
    ]),
    ("i am", [
        "Why do you feel this way?",
        "Is this feeling common for you?",
        "What makes you say that?",
    ]),
    ("i want", [
        "What would it mean if you got what you want?",
        "Why do you want that?",
        "How would your life change if you had it?",
    ]),
    ("i need", [
        "Why do you need that?",
        "How does it feel to need this?",
        "What makes this so important to you?",
    ]),
]

KEYWORD_TABLE = RuleTable.from_rules(
    Rule.from_keyword(keyword, responses, name=keyword) for keyword, responses in _KEYWORDS
)


BUILTIN_TABLES = {
    "classic": CLASSIC_TABLE,
    "keyword": KEYWORD_TABLE,
}


def builtin_table(name: str) -> RuleTable:
    """
    Get a built-in rule table by name.

    Raises:
        ConfigError: If no table has that name
    """
    try:
        return BUILTIN_TABLES[name]
    except KeyError:
        raise ConfigError(f"Unknown built-in rule table: {name}", {"available": sorted(BUILTIN_TABLES)})
