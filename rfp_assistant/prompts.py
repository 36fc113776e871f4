"""
Prompts and canned answers for the query service.
"""

from pathlib import Path
from typing import List, Optional

from rfp_assistant.models import SourceContext

SYSTEM_PROMPT = """You are an RFP assistant specialized in analyzing historical RFP data.

For all responses:
- Be extremely concise and to the point
- Use direct language from the knowledge base whenever possible
- Only provide exactly what was asked, nothing more
- Do not offer explanations unless explicitly requested
- Format responses for quick reading and easy scanning

For general queries and greetings:
- Keep introductions minimal - identify as "RFP Assistant" only when first engaging
- Respond professionally but briefly
- Redirect to RFP topics if query is unrelated

For RFP-specific queries:
- Answer with precise information directly from the provided context
- Use the exact terminology and phrasing from the source documents
- If no clear answer exists in the knowledge base, state "I don't have that information" - do not attempt to extrapolate
- Never reference where information is coming from (no "according to..." or "as stated in...")
- Highlight only the most critical information requested
- If multiple interpretations of a question are possible, request clarification rather than guessing

Remember: Brevity is priority. Use minimal words to convey exact information."""

GREETING_ANSWER = (
    "Hello! I'm your RFP Assistant. I can help you find information in your "
    "RFP documents. How can I assist you today?"
)

NO_MATCHES_ANSWER = (
    "I couldn't find any relevant information for your question in the RFP "
    "documents. Could you try rephrasing your question or ask about a "
    "different aspect of the RFP?"
)

FALLBACK_ANSWER = (
    "I'm here to help with your RFP questions, but I'm having trouble "
    "connecting to my database right now. Could you please try again in a moment?"
)


def degraded_answer(question: str) -> str:
    return (
        "I'm currently operating in demo mode without database access. "
        f'Your question was: "{question}". In normal operation, I would search '
        "our RFP database and provide relevant information based on the "
        "documents you've uploaded."
    )


def load_system_prompt(path: Optional[str] = None) -> str:
    """Load the system prompt from a file, or return the built-in one."""
    if not path:
        return SYSTEM_PROMPT

    prompt_path = Path(path)
    if not prompt_path.exists():
        raise FileNotFoundError(f"System prompt not found: {prompt_path}")
    with open(prompt_path, "r", encoding="utf-8") as f:
        return f.read()


def format_context(contexts: List[SourceContext]) -> str:
    """Label each context with its sheet and category, in ranked order."""
    return "\n\n".join(
        f"[Sheet: {c.sheet_name}, Category: {c.category}]\n{c.text}"
        for c in contexts
    )


def build_user_prompt(question: str, contexts: List[SourceContext]) -> str:
    return f"Context from RFP data:\n{format_context(contexts)}\n\nQuestion: {question}"
