from ..models.article import CATEGORIES

ARTICLE_SHAPE = """[{
  "title": "...",
  "category": "...",
  "summaryPoints": ["...", "...", "..."],
  "fullContent": "## Background\\n...\\n\\n## Latest developments\\n...",
  "tags": ["...", "..."]
}]"""

FACT_CHECK_SHAPE = """{
  "overallVerdict": "TRUE" | "MOSTLY TRUE" | "PARTIALLY TRUE" | "MISLEADING" | "MOSTLY FALSE" | "FALSE" | "UNVERIFIED",
  "truthPercentage": <integer 0-100>,
  "overallSummary": "<2-3 sentences>",
  "claimVerifications": [
    {
      "claim": "<claim being checked>",
      "verdict": "TRUE" | "PARTIALLY TRUE" | "MISLEADING" | "UNVERIFIED" | "FALSE",
      "explanation": "<1-2 sentences>",
      "sources": ["<source organisation>"]
    }
  ],
  "sources": [
    {
      "name": "<source organisation>",
      "type": "Government Data" | "News Outlet" | "Research Paper" | "Official Statement" | "Expert Analysis" | "Public Records",
      "reliability": "High" | "Medium" | "Low"
    }
  ],
  "redFlags": ["<concern>"],
  "context": "<background that helps judge the claims>"
}"""


def search_article_prompt(query, region):
    return f"""You are a senior news journalist writing for a neutral {region} news site. A reader searched for: "{query}"

Write exactly 1 factual, balanced news article about this topic, in the {region} context.

Fields:
- title: a professional headline of 8-15 words
- category: exactly one of [{', '.join(CATEGORIES)}]
- summaryPoints: 5-6 short bullet points of 10-20 words each
- fullContent: a 300-500 word article split into sections with "## Section Title" headers, covering background, current developments, analysis and outlook
- tags: 4-6 keywords

Answer with a JSON array holding the single article:
{ARTICLE_SHAPE}

Rules:
- Stick to real, current events connected to the search
- Present all sides fairly
- Do not invent statistics or quotes"""


def front_page_prompt(topics, region):
    lines = []
    for i, topic in enumerate(topics):
        description = topic.get("description") or "N/A"
        lines.append(f'{i + 1}. Topic: "{topic["title"]}" | Category: {topic.get("category")} | Description: {description}')
    topic_lines = "\n".join(lines)
    return f"""You are a senior news journalist writing for a neutral {region} news site. Write one factual, balanced article for each of these trending topics:

{topic_lines}

Fields for every article:
- title: a professional headline of 8-15 words, unique across the batch
- category: the category given for the topic
- summaryPoints: 6-8 short bullet points of 10-20 words each
- fullContent: a 500-800 word article split into sections with "## Section Title" headers, covering background, current developments, stakeholders and their positions, impact on ordinary people and outlook
- tags: 4-6 keywords

Answer with one JSON array containing exactly {len(topics)} articles, in topic order:
{ARTICLE_SHAPE}

Rules:
- For political topics, give both government and opposition positions
- Present all sides fairly
- Do not invent statistics or quotes"""


def trending_topics_prompt(region, per_category=10):
    total = per_category * len(CATEGORIES)
    return f"""You are a news analyst following current affairs in {region}. List exactly {per_category} topics trending right now for EACH of these categories, {total} topics in total:

Categories: {', '.join(CATEGORIES)}

For each topic:
- title: 3-8 words, specific (no vague titles like "Latest News")
- description: one sentence, at most 20 words
- category: one of the categories above
- trendScore: integer 1-100, how strongly it is trending
- source: one of "Google Trends", "Social Media", "News Outlets", "Public Interest"

Answer with a single flat JSON array of all {total} topics:
[{{"title": "", "description": "", "category": "", "trendScore": 0, "source": ""}}]

Every title must be unique across all categories."""


def fact_check_prompt(article, summary_points):
    claims = "\n".join(f"{i + 1}. {point}" for i, point in enumerate(summary_points))
    return f"""You are a rigorous fact-checker at an independent news verification desk. Verify the claims of this article.

Title: "{article.get('title')}"
Category: {article.get('category')}
Key claims:
{claims}

For every claim, decide whether it is TRUE, PARTIALLY TRUE, MISLEADING, UNVERIFIED or FALSE, explain why in one or two sentences, and name the credible organisations that would confirm or refute it. Then give an overall assessment.

Answer with a single JSON object:
{FACT_CHECK_SHAPE}

Rules:
- Predictions and future events are UNVERIFIED
- Broadly accurate claims lacking verifiable detail are PARTIALLY TRUE
- Cite organisation names only, never URLs
- Note when the article itself is AI generated"""
