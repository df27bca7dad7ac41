"""
Resource catalog: metadata extraction and static content pipeline for
agent, prompt, instruction, skill, hook and workflow repositories.
"""

__version__ = "0.1.0"
