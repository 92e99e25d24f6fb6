"""
Civic issue categories and the metadata attached to a classification.
"""

from typing import Dict


ISSUE_CATEGORIES: Dict[str, Dict[str, str]] = {
    "POTHOLE": {
        "description": "Road surface damage requiring immediate attention",
        "department": "Road Maintenance",
        "estimated_cost": "Medium",
        "estimated_time": "2-3 days",
    },
    "STREET_LIGHT": {
        "description": "Street lighting issues affecting safety",
        "department": "Electrical",
        "estimated_cost": "Low",
        "estimated_time": "1-2 days",
    },
    "GARBAGE_OVERFLOW": {
        "description": "Waste management issue requiring immediate cleanup",
        "department": "Sanitation",
        "estimated_cost": "Low",
        "estimated_time": "1 day",
    },
    "DRAIN_BLOCKAGE": {
        "description": "Drainage system blockage potentially causing flooding",
        "department": "Water Management",
        "estimated_cost": "Medium",
        "estimated_time": "2-3 days",
    },
    "BROKEN_SIDEWALK": {
        "description": "Sidewalk damage affecting pedestrian safety",
        "department": "Infrastructure",
        "estimated_cost": "Medium",
        "estimated_time": "3-5 days",
    },
    "WATER_LEAK": {
        "description": "Water supply leak requiring urgent repair",
        "department": "Water Supply",
        "estimated_cost": "High",
        "estimated_time": "1-2 days",
    },
    "DAMAGED_SIGN": {
        "description": "Traffic or information signage damage",
        "department": "Traffic Management",
        "estimated_cost": "Low",
        "estimated_time": "2-3 days",
    },
    "ILLEGAL_DUMPING": {
        "description": "Unauthorized waste disposal requiring cleanup",
        "department": "Sanitation",
        "estimated_cost": "Medium",
        "estimated_time": "1-2 days",
    },
    "VEGETATION_OVERGROWTH": {
        "description": "Overgrown vegetation obstructing paths or visibility",
        "department": "Parks & Gardens",
        "estimated_cost": "Low",
        "estimated_time": "2-3 days",
    },
    "OTHER": {
        "description": "General civic issue requiring assessment",
        "department": "General Administration",
        "estimated_cost": "Variable",
        "estimated_time": "Variable",
    },
}


def category_metadata(category: str) -> Dict[str, str]:
    """Fields merged into a classification for its category (OTHER if unknown)."""
    info = ISSUE_CATEGORIES.get(category, ISSUE_CATEGORIES["OTHER"])
    return {
        "department_responsible": info["department"],
        "estimated_cost": info["estimated_cost"],
        "estimated_repair_time": info["estimated_time"],
        "category_description": info["description"],
    }
