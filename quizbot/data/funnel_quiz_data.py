# Default funnel questionnaire, seeded into an empty database on start-up.
# Questions follow list order unless an option names "next" (or "end": True).

funnel_title = "funnel"

question_definitions_funnel = [
    {
        "id": "q1",
        "text": "Why do you want to learn Spanish?",
        "options": [
            {"value": "travel", "label": "To travel with confidence"},
            {"value": "work", "label": "For my career"},
            {"value": "family", "label": "To talk with family and friends"},
            {"value": "fun", "label": "Just for fun"},
        ],
    },
    {
        "id": "q2",
        "text": "How would you describe your current Spanish level?",
        "options": [
            {"value": "none", "label": "Complete beginner"},
            {"value": "basic", "label": "I know a few words and phrases"},
            {"value": "conversational", "label": "I can hold a simple conversation"},
            {"value": "advanced", "label": "I'm fairly fluent"},
        ],
    },
    {
        "id": "q3",
        "text": "What has held you back so far?",
        "options": [
            {"value": "time", "label": "Not enough time"},
            {"value": "motivation", "label": "Staying motivated"},
            {"value": "speaking", "label": "Fear of speaking"},
            {"value": "method", "label": "Haven't found the right method"},
        ],
    },
    {
        "id": "q4",
        "text": "How much time can you dedicate each week?",
        "options": [
            {"value": "1h", "label": "About 1 hour"},
            {"value": "3h", "label": "2-3 hours"},
            {"value": "5h", "label": "4-5 hours"},
            {"value": "more", "label": "More than 5 hours"},
        ],
    },
    {
        "id": "q5",
        "text": "How do you prefer to learn?",
        "options": [
            {"value": "live", "label": "Live classes with a teacher"},
            {"value": "self", "label": "At my own pace"},
            {"value": "mix", "label": "A mix of both"},
        ],
    },
    {
        "id": "q6",
        "text": "When would you like to start?",
        "options": [
            {"value": "now", "label": "Right away"},
            {"value": "month", "label": "Within a month"},
            {"value": "later", "label": "Later this year"},
        ],
    },
]
