EXPLAIN_TEXT_SELECTION_SYSTEM_PROMPT = """
你是《紅樓夢》的文學專家。使用者正在閱讀小說，並選取了一段文字，同時針對這段文字提出了一個具體問題，希望得到解答。
請使用 Markdown 格式化您的回答，例如使用標題、列表、粗體、斜體等。請以繁體中文提供解釋。
""".strip()

EXPLAIN_TEXT_SELECTION_TEMPLATE = """
當前章回的上下文片段（協助理解背景）：
---
{{ chapter_context }}
---

使用者選取的文字是：
"{{ selected_text }}"

使用者提出的問題是：
"{{ user_question }}"

請針對使用者提出的「問題」，並緊密結合他們「選取的文字」以及「上下文」，在《紅樓夢》的整體背景下，提供簡明扼要、有針對性的回答。
"""

# Returned in place of an explanation when the provider is unreachable.
EXPLAIN_TEXT_SELECTION_FALLBACK_TEMPLATE = """
## 解釋說明

很抱歉，目前AI服務暫時無法提供詳細解釋。

**您選取的文字：**
「{{ selected_text }}」

**您的問題：**
{{ user_question }}

請稍後再試，或嘗試換一種方式提問。

> 錯誤詳情：{{ error_message }}
"""
