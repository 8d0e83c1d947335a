"""Standard pitch tags, their suggestion keywords, and pitch templates.

The vocabulary is fixed for the lifetime of the process. Order matters:
suggestions are returned in table order.
"""

STANDARD_TAGS = (
    "🌱 CleanTech",
    "🎮 Gaming",
    "🎨 Art",
    "🤖 AI/ML",
    "📚 Education",
    "🌊 Ocean",
    "💸 Needs Funding",
    "🔥 Needs Dev",
    "🎨 Needs Design",
)

TAG_KEYWORDS = (
    {
        "tag": "🌱 CleanTech",
        "keywords": ("clean", "sustain", "green", "environment"),
        "description": "environmental/sustainability tech",
    },
    {
        "tag": "🎮 Gaming",
        "keywords": ("game", "play", "entertainment"),
        "description": "gaming/entertainment",
    },
    {
        "tag": "🎨 Art",
        "keywords": ("art", "creative", "design", "visual"),
        "description": "creative/artistic projects",
    },
    {
        "tag": "🤖 AI/ML",
        "keywords": ("ai", "machine learning", "artificial intelligence", "algorithm"),
        "description": "artificial intelligence/machine learning",
    },
    {
        "tag": "📚 Education",
        "keywords": ("learn", "education", "school", "teach"),
        "description": "learning/educational projects",
    },
    {
        "tag": "🌊 Ocean",
        "keywords": ("ocean", "marine", "sea", "water"),
        "description": "marine/ocean-related projects",
    },
    {
        "tag": "💸 Needs Funding",
        "keywords": ("fund", "money", "investment", "capital"),
        "description": "if the pitch mentions funding needs",
    },
    {
        "tag": "🔥 Needs Dev",
        "keywords": ("developer", "programmer", "engineer", "code"),
        "description": "if the pitch mentions needing developers",
    },
    {
        "tag": "🎨 Needs Design",
        "keywords": ("designer", "ui", "ux", "visual"),
        "description": "if the pitch mentions needing designers",
    },
)

# Pre-written pitch outlines offered by the legacy content analysis endpoint
PITCH_TEMPLATES = (
    {
        "id": "cleantech",
        "tag": "🌱 CleanTech",
        "name": "Climate Impact Pitch",
        "outline": ["The environmental problem", "Your solution", "Measurable impact", "What you need"],
    },
    {
        "id": "gaming",
        "tag": "🎮 Gaming",
        "name": "Game Concept Pitch",
        "outline": ["Core gameplay loop", "Target players", "What makes it fun", "Team and next steps"],
    },
    {
        "id": "art",
        "tag": "🎨 Art",
        "name": "Creative Project Pitch",
        "outline": ["The idea", "Medium and style", "Audience", "Collaborators wanted"],
    },
    {
        "id": "ai",
        "tag": "🤖 AI/ML",
        "name": "AI Product Pitch",
        "outline": ["Problem worth automating", "Model and data", "Why now", "Traction"],
    },
    {
        "id": "education",
        "tag": "📚 Education",
        "name": "Learning Experience Pitch",
        "outline": ["Who learns", "What changes for them", "Delivery", "Proof it works"],
    },
    {
        "id": "ocean",
        "tag": "🌊 Ocean",
        "name": "Blue Economy Pitch",
        "outline": ["Ocean challenge", "Intervention", "Partners", "Scale plan"],
    },
    {
        "id": "funding",
        "tag": "💸 Needs Funding",
        "name": "Investor Ask",
        "outline": ["Problem", "Solution", "Market", "The ask and use of funds"],
    },
    {
        "id": "dev",
        "tag": "🔥 Needs Dev",
        "name": "Technical Co-founder Call",
        "outline": ["What you're building", "Stack so far", "Who you need", "What they get"],
    },
    {
        "id": "design",
        "tag": "🎨 Needs Design",
        "name": "Designer Call",
        "outline": ["Product vision", "Current state", "Design gaps", "How to collaborate"],
    },
)

GENERIC_TEMPLATE = {
    "id": "general",
    "tag": None,
    "name": "Elevator Pitch",
    "outline": ["Hook", "Problem", "Solution", "Call to action"],
}
