"""Prompt for refining page titles/descriptions and surfacing questions."""

ENRICHMENT_SYSTEM_PROMPT = (
    "You refine llms.txt inputs. Return JSON only. Provide up to 4 concise user "
    "questions and improved titles/descriptions for the provided URLs. "
    "Descriptions must be factual, <= 160 characters, and avoid marketing fluff."
)

# Shape of the JSON the model is asked to return. Sent alongside the payload
# so providers without a strict JSON mode still see the expected keys.
ENRICHMENT_RESPONSE_SHAPE = """{
  "questions": ["Short question a visitor would ask?"],
  "pages": [
    {
      "url": "https://example.com/page",
      "title": "Page title",
      "description": "One factual sentence about the page"
    }
  ]
}"""
