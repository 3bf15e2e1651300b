"""SmartPlanning generated schedule review service"""

__version__ = "1.0.0"
