"""Demo catalogue loaded into an empty database at startup."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from workshop_hub.models.workshop import Workshop
from workshop_hub.schemas.workshop import WorkshopCreate
from workshop_hub.services.workshops import WorkshopService

LOGGER = logging.getLogger("workshop_hub.services.seed")

# Start times are offsets from the moment of seeding.
DEMO_WORKSHOPS: List[Dict[str, Any]] = [
    {
        "title": "React Fundamentals",
        "subtitle": "Master the basics of React development",
        "description": (
            "A comprehensive bootcamp covering React fundamentals including components, state management, "
            "hooks, and modern React patterns."
        ),
        "category": "Frontend",
        "level": "Beginner",
        "mode": "Online",
        "start_offset": timedelta(days=2),
        "duration_minutes": 180,
        "capacity_total": 50,
        "capacity_filled": 24,
        "trainer": {
            "name": "Sagar Gupta",
            "bio": "Senior React Developer with 8+ years of experience.",
            "rating": 4.8,
        },
        "tags": ["React", "JavaScript", "Frontend", "Beginner"],
        "agenda": [
            "Introduction to React",
            "Components and JSX",
            "State and Props",
            "Event Handling",
            "Hooks Overview",
            "Building Your First App",
        ],
        "links": {
            "zoom": "https://zoom.us/j/123456789",
            "youtube": "https://youtube.com/watch?v=example",
            "whatsapp": "https://chat.whatsapp.com/example",
        },
    },
    {
        "title": "Advanced TypeScript Workshop",
        "subtitle": "Deep dive into TypeScript advanced features",
        "description": (
            "Advanced types, generics, decorators, and real-world patterns used in enterprise applications."
        ),
        "category": "Programming",
        "level": "Advanced",
        "mode": "Hybrid",
        "start_offset": timedelta(minutes=-15),
        "duration_minutes": 120,
        "capacity_total": 30,
        "capacity_filled": 28,
        "trainer": {
            "name": "Alakh Pandey",
            "bio": "TypeScript enthusiast and tech lead working on large-scale applications.",
            "rating": 4.9,
        },
        "tags": ["TypeScript", "Advanced", "Programming"],
        "agenda": [
            "Advanced Type System",
            "Generics and Constraints",
            "Utility Types",
            "Decorators",
            "Module System",
            "Performance Optimization",
        ],
        "links": {
            "zoom": "https://zoom.us/j/987654321",
            "youtube": "https://youtube.com/watch?v=live-example",
            "whatsapp": "https://chat.whatsapp.com/typescript",
        },
    },
    {
        "title": "Node.js Backend Development",
        "subtitle": "Build scalable backend applications",
        "description": (
            "Build robust, scalable backend applications using Node.js, Express, and MongoDB. "
            "Covers authentication, APIs, and deployment."
        ),
        "category": "Backend",
        "level": "Intermediate",
        "mode": "Online",
        "start_offset": timedelta(days=5),
        "duration_minutes": 240,
        "capacity_total": 40,
        "capacity_filled": 12,
        "trainer": {
            "name": "Khan Sir",
            "bio": "Full-stack developer specializing in Node.js and cloud architecture.",
            "rating": 4.7,
        },
        "tags": ["Node.js", "Backend", "API", "Database"],
        "agenda": [
            "Node.js Fundamentals",
            "Express.js Framework",
            "Database Integration",
            "Authentication & Security",
            "API Design",
            "Deployment Strategies",
        ],
        "links": {
            "zoom": "https://zoom.us/j/456789123",
            "youtube": "https://youtube.com/watch?v=nodejs-example",
            "whatsapp": "https://chat.whatsapp.com/nodejs",
        },
    },
    {
        "title": "UI/UX Design Principles",
        "subtitle": "Create beautiful and functional interfaces",
        "description": (
            "Practical exercises in design thinking and modern design tools for user-centered interfaces."
        ),
        "category": "Design",
        "level": "Beginner",
        "mode": "Offline",
        "start_offset": timedelta(days=-3),
        "duration_minutes": 150,
        "capacity_total": 25,
        "capacity_filled": 25,
        "trainer": {
            "name": "CodeWithHarry",
            "bio": "Senior UX Designer focused on user research and interface design.",
            "rating": 4.6,
        },
        "tags": ["Design", "UX", "UI", "Creative"],
        "agenda": [
            "Design Thinking Process",
            "User Research Methods",
            "Wireframing & Prototyping",
            "Visual Design Principles",
            "Usability Testing",
            "Design Systems",
        ],
        "links": {
            "zoom": None,
            "youtube": "https://youtube.com/watch?v=design-recorded",
            "whatsapp": "https://chat.whatsapp.com/design",
        },
    },
    {
        "title": "Python Data Science Intensive",
        "subtitle": "Analyze data with Python and machine learning",
        "description": (
            "Python, pandas, NumPy, matplotlib, and an introduction to machine learning concepts."
        ),
        "category": "Data Science",
        "level": "Intermediate",
        "mode": "Online",
        "start_offset": timedelta(days=7),
        "duration_minutes": 300,
        "capacity_total": 60,
        "capacity_filled": 45,
        "trainer": {
            "name": "Apna College",
            "bio": "Data scientist with a PhD in Statistics and 12+ years in the field.",
            "rating": 4.8,
        },
        "tags": ["Python", "Data Science", "ML", "Analytics"],
        "agenda": [
            "Python for Data Science",
            "Data Manipulation with Pandas",
            "Data Visualization",
            "Statistical Analysis",
            "Machine Learning Basics",
            "Real-world Project",
        ],
        "links": {
            "zoom": "https://zoom.us/j/789123456",
            "youtube": "https://youtube.com/watch?v=datascience-example",
            "whatsapp": "https://chat.whatsapp.com/datascience",
        },
    },
    {
        "title": "DevOps and Cloud Computing",
        "subtitle": "Master modern deployment and infrastructure",
        "description": (
            "DevOps practices, CI/CD, Docker, Kubernetes, and cloud deployment strategies."
        ),
        "category": "DevOps",
        "level": "Advanced",
        "mode": "Hybrid",
        "start_offset": timedelta(days=-1),
        "duration_minutes": 200,
        "capacity_total": 35,
        "capacity_filled": 35,
        "trainer": {
            "name": "TechGuru",
            "bio": "DevOps engineer and cloud architect working with AWS, Docker, and Kubernetes.",
            "rating": 4.5,
        },
        "tags": ["DevOps", "Cloud", "Docker", "Kubernetes"],
        "agenda": [
            "DevOps Fundamentals",
            "CI/CD Pipelines",
            "Containerization with Docker",
            "Kubernetes Orchestration",
            "Cloud Deployment",
            "Monitoring & Logging",
        ],
        "links": {
            "zoom": None,
            "youtube": "https://youtube.com/watch?v=devops-recorded",
            "whatsapp": "https://chat.whatsapp.com/devops",
        },
    },
]


def seed_demo_workshops(session: Session, *, now: Optional[datetime] = None) -> int:
    """Insert the demo catalogue if no workshop exists yet. Returns rows created."""

    existing = session.scalar(select(func.count()).select_from(Workshop))
    if existing:
        return 0

    now = now or datetime.now(timezone.utc)
    service = WorkshopService(session)
    for entry in DEMO_WORKSHOPS:
        data = dict(entry)
        start_offset = data.pop("start_offset")
        payload = WorkshopCreate.model_validate({**data, "scheduled_start": now + start_offset})
        service.create_workshop(payload, now=now)

    LOGGER.info("demo_workshops_seeded", extra={"count": len(DEMO_WORKSHOPS)})
    return len(DEMO_WORKSHOPS)
