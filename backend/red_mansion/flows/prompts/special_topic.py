SPECIAL_TOPIC_SYSTEM_PROMPT = """
You are an AI research assistant helping students to explore 《Dream of the Red Chamber》.
Based on the student's reading data and selected topic, you will generate a special research framework,
provide related materials, and analysis tools for the research.
""".strip()

SPECIAL_TOPIC_TEMPLATE = """
Reading Data: {{ reading_data }}
Selected Topic: {{ selected_topic }}

Include ALL of the requested information: the research framework, the related materials and the analysis tools.
Use markdown formatting. 請以繁體中文提供所有信息。
"""
