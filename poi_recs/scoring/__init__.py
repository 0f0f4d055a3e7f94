"""
Recommendation scoring engine.

Responsibilities:
- Model candidates, traveller context and ranked results.
- Turn a category's base weights into an effective weight profile per context.
- Compute bounded sub-scores and combine them into one score per candidate.
- Filter, order and cut (top-N or paged) the scored candidates.
"""
