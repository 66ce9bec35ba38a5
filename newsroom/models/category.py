CATEGORY_SEED = [
    {"name": "Politics", "slug": "politics", "description": "Indian political news and analysis", "icon": "🏛️"},
    {"name": "Technology", "slug": "technology", "description": "Tech industry news and innovations", "icon": "💻"},
    {"name": "Business", "slug": "business", "description": "Business and economy news", "icon": "📈"},
    {"name": "Sports", "slug": "sports", "description": "Sports news and updates", "icon": "⚽"},
    {"name": "Entertainment", "slug": "entertainment", "description": "Bollywood, movies, and pop culture", "icon": "🎬"},
    {"name": "Science", "slug": "science", "description": "Science and research breakthroughs", "icon": "🔬"},
    {"name": "World", "slug": "world", "description": "International news", "icon": "🌍"},
    {"name": "Education", "slug": "education", "description": "Education sector news", "icon": "📚"},
    {"name": "Health", "slug": "health", "description": "Health and medical news", "icon": "🏥"},
    {"name": "Environment", "slug": "environment", "description": "Climate and environmental news", "icon": "🌿"},
]
