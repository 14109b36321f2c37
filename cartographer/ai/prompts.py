"""
Prompt templates for the explainer.

The graph has already decided what is relevant; these prompts only ask the
model to put the selected facts into words.
"""

from langchain_core.prompts import ChatPromptTemplate


EXPLAIN_RESULT_PROMPT = ChatPromptTemplate.from_template("""You are Cartographer, explaining the result of a codebase graph query.
The analysis is already done. Explain it; do not analyse further.

Question: {question}
Query intent: {intent}

=== FILES ({file_count}) ===
{files}

=== FUNCTIONS ({function_count}) ===
{functions}

=== METADATA ===
{metadata}

=== CONTEXT PREVIEW ===
{context_preview}

Explain clearly what these results mean for the question: the relationships
between the listed files and functions and what they imply for a developer.
Do NOT invent structure that is not in the data above.
Keep it under 200 words.

Explanation:""")


ANSWER_QUESTION_PROMPT = ChatPromptTemplate.from_template("""You are Cartographer, helping a developer understand their codebase.

The developer asked: "{question}"

Relevant project files:

{code_context}

Answer from the code above. Reference file and function names where they
help. If more files are needed to answer, say which ones.
Keep the answer clear and concise.

Answer:""")


SUMMARIZE_FILE_PROMPT = ChatPromptTemplate.from_template("""Summarize the purpose of this source file in two or three sentences
for a developer new to the project.

File: {path}

```
{content}
```

Summary:""")


def format_listing(items, limit: int = 10) -> str:
    """Bullet list of the first `limit` items with an overflow note."""
    if not items:
        return "(none)"
    lines = [f"  - {item}" for item in items[:limit]]
    if len(items) > limit:
        lines.append(f"  ... and {len(items) - limit} more")
    return "\n".join(lines)
