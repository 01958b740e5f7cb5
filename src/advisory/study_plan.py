"""Study-plan suggestions for tutors.

Plain lookup tables keyed by disability and subject. Every lookup has an
explicit fallback so an unknown or "Other" disability still gets a plan.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from src.profile.models import StudentProfile


@dataclass(frozen=True)
class StudyPlan:
    strategies: tuple[str, ...]
    activities: tuple[str, ...]


DEFAULT_STUDY_PLAN = StudyPlan(
    strategies=(
        "Personalized learning approach based on individual needs",
        "Regular assessment and adjustment of methods",
        "Collaborative goal setting",
        "Strength-based learning strategies",
    ),
    activities=(
        "Customized study materials",
        "Regular progress check-ins",
        "Adaptive learning techniques",
        "Peer support integration",
    ),
)

STUDY_PLANS: Mapping[str, StudyPlan] = MappingProxyType(
    {
        "Dyslexia": StudyPlan(
            strategies=(
                "Use multi-sensory learning approaches",
                "Break down complex information into smaller chunks",
                "Provide visual aids and graphic organizers",
                "Allow extra time for reading and processing",
            ),
            activities=(
                "Audio recordings of key concepts",
                "Color-coded notes and materials",
                "Interactive reading exercises",
                "Mind mapping for comprehension",
            ),
        ),
        "ADHD": StudyPlan(
            strategies=(
                "Create structured, predictable routines",
                "Use frequent breaks and movement",
                "Provide clear, step-by-step instructions",
                "Minimize distractions in learning environment",
            ),
            activities=(
                "Pomodoro technique for focused study",
                "Interactive and hands-on learning",
                "Goal-setting and progress tracking",
                "Fidget tools during study sessions",
            ),
        ),
        "Autism Spectrum Disorder": StudyPlan(
            strategies=(
                "Maintain consistent routines and structure",
                "Use clear, literal communication",
                "Provide advance notice of changes",
                "Incorporate special interests into learning",
            ),
            activities=(
                "Visual schedules and checklists",
                "Social stories for new concepts",
                "Sensory-friendly learning environment",
                "Special interest-based examples",
            ),
        ),
    }
)

DEFAULT_SUBJECT_ADVICE = "Adapt teaching methods to match individual learning preferences and needs."

# Each subject table has a "default" entry used for disabilities it does not list
SUBJECT_ADVICE: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "Math": MappingProxyType(
            {
                "Dyslexia": "Use visual representations and manipulatives. Break word problems into steps.",
                "ADHD": "Provide frequent breaks and use interactive problem-solving methods.",
                "Autism Spectrum Disorder": "Use consistent notation and step-by-step procedures.",
                "default": "Focus on conceptual understanding with multiple representation methods.",
            }
        ),
        "English": MappingProxyType(
            {
                "Dyslexia": "Use audio books and text-to-speech tools. Focus on comprehension over spelling.",
                "ADHD": "Break reading into shorter segments with discussion breaks.",
                "Autism Spectrum Disorder": "Use graphic organizers and visual story maps.",
                "default": "Emphasize multiple ways to express understanding and ideas.",
            }
        ),
        "Science": MappingProxyType(
            {
                "Dyslexia": "Use hands-on experiments and visual diagrams to explain concepts.",
                "ADHD": "Incorporate movement and interactive demonstrations.",
                "Autism Spectrum Disorder": "Provide clear procedures and predictable lab routines.",
                "default": "Use inquiry-based learning with multiple modalities.",
            }
        ),
    }
)

DEFAULT_DISABILITY_TIP = (
    "Focus on the student's individual strengths and adapt your teaching methods "
    "to their specific needs and preferences."
)

DISABILITY_TIPS: Mapping[str, str] = MappingProxyType(
    {
        "Dyslexia": (
            "Use multi-sensory approaches, provide extra time for reading, use visual aids, "
            "and break information into smaller chunks."
        ),
        "ADHD": (
            "Keep sessions structured but flexible, use frequent breaks, minimize distractions, "
            "and incorporate movement when possible."
        ),
        "Autism Spectrum Disorder": (
            "Maintain consistent routines, use clear and literal communication, provide advance "
            "notice of changes, and incorporate their special interests."
        ),
        "Visual Impairment": (
            "Use audio descriptions, tactile materials, and ensure good lighting. "
            "Describe visual content verbally."
        ),
        "Hearing Impairment": (
            "Face the student when speaking, use visual aids, write key points, and ensure "
            "good lighting for lip reading."
        ),
        "Physical Disability": (
            "Ensure accessible seating and materials, allow extra time for physical tasks, "
            "and adapt activities as needed."
        ),
    }
)


def study_plan(disability: str) -> StudyPlan:
    return STUDY_PLANS.get(disability, DEFAULT_STUDY_PLAN)


def subject_advice(subject: str, disability: str) -> str:
    """Advice for teaching ``subject`` to a student with ``disability``."""
    table = SUBJECT_ADVICE.get(subject)
    if table is None:
        return DEFAULT_SUBJECT_ADVICE
    return table.get(disability, table["default"])


def disability_tips(disability: str) -> str:
    return DISABILITY_TIPS.get(disability, DEFAULT_DISABILITY_TIP)


def plan_overview(profile: StudentProfile) -> str:
    """One-line summary of who the plan is for."""
    prefs = profile.learning_preferences
    disability = profile.primary_disability or "the student's needs"
    style = prefs.style.lower() if prefs.style else "flexible"
    if not style.endswith("learning"):
        style += " learning"
    learning_format = prefs.format.lower() if prefs.format else "flexible"
    return (
        f"This plan is tailored for {disability} with a {style} style "
        f"in a {learning_format} format."
    )
