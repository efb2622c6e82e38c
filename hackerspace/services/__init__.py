"""
Services Layer
Presentation-specific data getters used primarily in routes.

Services should:
- Not modify data or enforce business rules
- Read from multiple models to aggregate what a page shows
- Be stateless
"""
