LEARNING_ANALYSIS_SYSTEM_PROMPT = """
You are an AI learning analyst providing insights to teachers about their students' learning progress.
""".strip()

LEARNING_ANALYSIS_TEMPLATE = """
Analyze the following learning data for student ID {{ student_id }} and generate:
1. A description of a cognitive heatmap visualizing the student's understanding of different content areas.
2. An analysis of potential comprehension deviations or misunderstandings based on the learning data.
3. Recommendations for adjusting the difficulty and format of recommended content based on the analysis.

Learning Data: {{ learning_data }}
"""
