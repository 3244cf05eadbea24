"""Prompt templates for document analysis and follow-up questions."""

from datetime import date
from typing import Optional

ANALYSIS_PROMPT_TEMPLATE = """Analyze the following document:
---
{document_text}
---

Please provide:
1. A concise summary of the key points (maximum 5 bullet points)
2. Action items required with deadlines if mentioned
3. Relevant category tags for this document (maximum 5 tags)

Format your response as JSON with the following structure:
{{
  "summary": "bullet point summary here",
  "actionItems": [{{"task": "task description", "dueDate": "YYYY-MM-DD (if no deadline is mentioned use {today})", "priority": "high/medium/low"}}],
  "tags": ["tag1", "tag2", "tag3"]
}}
"""

QUESTION_PROMPT_TEMPLATE = """The following is a document text:
---
{document_text}
---

Question about this document: "{question}"

Please answer this question based only on information from the document. If the answer cannot be determined from the document, say so clearly.
"""


def format_analysis_prompt(document_text: str, today: Optional[date] = None) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(
        document_text=document_text,
        today=(today or date.today()).isoformat(),
    )


def format_question_prompt(document_text: str, question: str) -> str:
    return QUESTION_PROMPT_TEMPLATE.format(document_text=document_text, question=question)
