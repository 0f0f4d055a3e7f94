"""
Recommendation service.

Responsibilities:
- Load the candidate catalog and apply each category's coarse filters.
- Run a category's candidate queries concurrently and merge the results.
- Hand candidates and traveller context to the scoring engine.
- Return paged or top-N results ready for API serialisation.
"""
