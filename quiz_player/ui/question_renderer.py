"""HTML documents for the three kinds of quiz step."""

from __future__ import annotations

from quiz_player.core.markdown_math_renderer import renderer
from quiz_player.core.models import QuizQuestion, QuizTransition


def render_transition(transition: QuizTransition, title: str, font_size: int = 14) -> str:
    return renderer.render_full_document(transition.content, title=title, font_size=font_size)


def render_question(question: QuizQuestion, font_size: int = 14) -> str:
    """Render a question stem, with its image when it has one.

    Args:
        question: The question slot to render (supports Markdown and LaTeX)
        font_size: Font size in points for the question text (default 14)

    Returns:
        HTML string ready for display in QWebEngineView
    """
    content = question.question
    markdown_parts = [content.content.strip() or "(No question text)"]
    if content.image_url:
        markdown_parts.append(f"![{content.title}]({content.image_url})")
    markdown = "\n\n".join(markdown_parts)
    return renderer.render_full_document(markdown, title=content.title, font_size=font_size)


def render_explanation(question: QuizQuestion, font_size: int = 14) -> str:
    return renderer.render_full_document(
        question.explanation,
        title=f"{question.question.title} - Explanation",
        font_size=font_size,
    )
