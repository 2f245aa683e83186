"""
EduInsight

Teacher quality analytics: deterministic scoring of student feedback with
LLM-backed dataset synthesis, feedback analysis and narrative summaries.
"""

__version__ = "0.1.0"
