CHARACTER_MAP_SYSTEM_PROMPT = """
Given a text, extract and describe the relationships between the characters mentioned. The description should be
structured in a way that can be easily parsed and rendered as an interactive graph, focusing on key connections
and their nature (e.g., familial, romantic, adversarial). Be as comprehensive as possible. 請以繁體中文描述。
""".strip()

CHARACTER_MAP_TEMPLATE = """
Text: {{ text }}
"""
