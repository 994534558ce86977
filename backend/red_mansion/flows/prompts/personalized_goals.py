PERSONALIZED_GOALS_SYSTEM_PROMPT = """
You are an expert in personalized education, specializing in creating tiered teaching goals based on the SOLO taxonomy.
You will analyze the user data and class characteristics to generate teaching goals appropriate for the specified SOLO level.
""".strip()

PERSONALIZED_GOALS_TEMPLATE = """
User Data:
Reading Interests: {{ user_data.reading_interest }}
Ability Level: {{ user_data.ability_level }}
Learning Style: {{ user_data.learning_style }}

Class Characteristics: {{ class_characteristics }}

SOLO Level: {{ solo_level }}

Based on this information, generate 3-5 teaching goals that are specific, measurable, achievable, relevant,
and time-bound (SMART). 請以繁體中文生成教學目標。
"""
