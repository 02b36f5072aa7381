"""Prompt templates for each article generation step.

Articles are written for Japanese-language media tenants, so the prompt text
is Japanese. Every builder returns a ``(system_prompt, user_prompt)`` pair.
"""

from datetime import date
from typing import Optional, Sequence, Tuple

from media_autowriter.agents.article_generation.models import (
    CategoryInfo,
    OutlineSection,
    PromptTemplate,
    WriterInfo,
)

PromptPair = Tuple[str, str]


def _date_label(today: date) -> str:
    return f"{today.year}年{today.month}月"


def theme_prompt(
    category: CategoryInfo,
    pattern: Optional[PromptTemplate],
    count: int,
    today: date,
    excluded_titles: Sequence[str] = (),
) -> PromptPair:
    system = (
        f"あなたはSEOに強い記事企画の専門家です。現在は{_date_label(today)}です。"
        f"必ず{today.year}年の最新トレンドと情報を基に、魅力的で実用的な記事テーマを提案してください。"
    )
    lines = [
        f"【現在の日付】{_date_label(today)}",
        "",
        f"以下の条件に基づいて、記事テーマを{count}つ提案してください。",
        "",
        f"カテゴリー: {category.name}",
    ]
    if category.description:
        lines.append(f"カテゴリー説明: {category.description}")
    if pattern is not None:
        lines += [f"構成パターン: {pattern.name}", "", "構成の詳細:", pattern.prompt]
    lines += [
        "",
        "提案する記事テーマの要件:",
        f"- {today.year}年の最新トレンドや情報を反映",
        "- SEOを意識したキーワードを含む",
        "- 読者の興味を引く魅力的なテーマ",
        "- それぞれのテーマは独立しており、重複しない",
    ]
    if excluded_titles:
        lines += ["", "以下の既存記事と重複・類似するテーマは提案しないでください:"]
        lines += [f"- {title}" for title in excluded_titles]
    lines += ["", "出力形式（必ず以下の形式で出力してください）:"]
    lines += [f"テーマ{i}: [記事テーマ]" for i in range(1, count + 1)]
    return system, "\n".join(lines)


def audience_prompt(category: CategoryInfo, title: str) -> PromptPair:
    system = (
        "あなたはマーケティングとペルソナ設計の専門家です。"
        "記事タイトルとカテゴリー情報から最適な想定読者を1つだけ提案してください。"
        "カンマで複数を列挙することは禁止です。"
    )
    description = f"\nカテゴリー説明: {category.description}" if category.description else ""
    user = (
        "以下の記事に最も適切な想定読者（ペルソナ）を提案してください。\n\n"
        f"カテゴリー名: {category.name}{description}\n"
        f"記事タイトル: {title}\n\n"
        "要件:\n"
        "- 1つの具体的な職業や立場のみを記述\n"
        "- 30文字以内で簡潔に\n"
        "- 「〜の方」「〜の人」などの表現は不要\n\n"
        "想定読者:"
    )
    return system, user


def outline_prompt(
    title: str,
    category: CategoryInfo,
    target_audience: str,
    pattern: Optional[PromptTemplate],
) -> PromptPair:
    system = (
        "あなたはSEOに精通した編集者です。記事の見出し構成を作成し、"
        "指定されたJSON形式のみで回答してください。"
    )
    steering = f"\n\n構成パターン（この指示に従ってください）:\n{pattern.prompt}" if pattern else ""
    user = (
        f"記事タイトル: {title}\n"
        f"カテゴリー: {category.name}\n"
        f"想定読者: {target_audience}"
        f"{steering}\n\n"
        "各セクションのH2見出しと、そのセクションで書く内容の要約を作成してください。\n"
        "出力形式:\n"
        '{"sections": [{"heading": "見出し", "summary": "要約"}]}'
    )
    return system, user


def section_prompt(
    title: str,
    target_audience: str,
    section: OutlineSection,
    index: int,
    total: int,
    previous_html: str,
    writer: WriterInfo,
    writing_style: Optional[PromptTemplate],
) -> PromptPair:
    system = f"あなたはライターの「{writer.handle_name}」です。"
    if writer.bio:
        system += f"プロフィール: {writer.bio}"
    if writing_style is not None:
        system += f"\n\n文体の指示:\n{writing_style.prompt}"

    context = previous_html if previous_html else "（これが最初のセクションです）"
    user = (
        f"記事タイトル: {title}\n"
        f"想定読者: {target_audience}\n\n"
        f"これまでに書いた本文:\n{context}\n\n"
        f"次のセクション（{index + 1}/{total}）の本文を書いてください。\n"
        f"見出し: {section.heading}\n"
        f"内容の要約: {section.summary}\n\n"
        "要件:\n"
        "- 見出し（h2）は含めず本文のみをHTML（<p>, <h3>, <ul>, <li>, <strong>）で出力\n"
        "- これまでの本文と内容を重複させない\n"
        "- 日本語で、読者に具体的に役立つ内容にする"
    )
    return system, user


def image_prompt(template: str, subject: str) -> str:
    """Image pattern template followed by the concrete subject."""
    return f"{template.strip()}\n\nSubject: {subject}".strip()


def alt_text_prompt(title: str, heading: Optional[str], surrounding_text: str) -> PromptPair:
    system = "あなたはWebアクセシビリティの専門家です。画像の代替テキストを作成してください。"
    heading_line = f"セクション見出し: {heading}\n" if heading else ""
    user = (
        f"記事タイトル: {title}\n"
        f"{heading_line}"
        f"周辺の本文: {surrounding_text[:500]}\n\n"
        "要件:\n"
        "- 画像の内容を具体的に説明する\n"
        "- 50文字以内\n"
        "- 「画像」「イメージ」「写真」などの言葉は使わない\n\n"
        "代替テキスト:"
    )
    return system, user


def meta_title_prompt(title: str) -> PromptPair:
    system = "あなたはSEOの専門家です。検索結果に表示されるメタタイトルを作成してください。"
    user = (
        f"記事タイトル: {title}\n\n"
        "要件:\n"
        "- 70文字以内\n"
        "- 主要なキーワードを前半に含める\n"
        "- メタタイトルのみを出力\n\n"
        "メタタイトル:"
    )
    return system, user


def meta_description_prompt(title: str, plain_content: str) -> PromptPair:
    system = "あなたはSEOの専門家です。検索結果に表示されるメタディスクリプションを作成してください。"
    user = (
        f"記事タイトル: {title}\n"
        f"本文（抜粋）: {plain_content[:1500]}\n\n"
        "要件:\n"
        "- 160文字以内\n"
        "- 記事を読むメリットが伝わる要約\n"
        "- メタディスクリプションのみを出力\n\n"
        "メタディスクリプション:"
    )
    return system, user


def slug_prompt(title: str) -> PromptPair:
    system = "You create short English URL slugs for Japanese articles."
    user = (
        f"Article title: {title}\n\n"
        "Translate the title's meaning into a concise English slug.\n"
        "- lowercase letters, digits and hyphens only\n"
        "- 3 to 6 words\n"
        "- output the slug only\n\n"
        "Slug:"
    )
    return system, user
