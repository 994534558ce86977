CONTEXT_ANALYSIS_SYSTEM_PROMPT = """
You are assisting a student reading "Dream of the Red Chamber".
""".strip()

CONTEXT_ANALYSIS_TEMPLATE = """
The student is currently reading chapter: {{ chapter }}.
The current text is:
{{ text }}

Provide a word sense analysis for any difficult words or phrases in the current context.
Also, generate a description of the character relationships that are relevant to the current text.
Include a summary of the plot points or character interactions.
請使用 Markdown 格式化您的回答，例如使用標題（例如：## 標題）、列表（例如：- 項目）、粗體（例如：**重要文字**）、斜體（例如：*強調文字*）等。請以繁體中文提供分析和描述。
"""
