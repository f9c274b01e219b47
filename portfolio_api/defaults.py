"""
Default content used when the portfolio is first created.
"""

from __future__ import annotations

DEFAULT_PERSONAL_INFO = {
    "name": "Portfolio Owner",
    "role": "Full Stack Developer",
    "tagline": "Building innovative web solutions with modern technologies",
    "phone": "",
    "email": "owner@example.com",
    "github": "https://github.com/",
    "linkedin": "https://www.linkedin.com/",
    "profile_image": "",
}

DEFAULT_ABOUT_ME = (
    "I am a passionate Full Stack Developer with expertise in modern web "
    "technologies. I love creating innovative solutions and bringing ideas "
    "to life through code."
)

BASELINE_SKILLS = [
    {"name": "Python", "level": 90},
    {"name": "FastAPI", "level": 85},
    {"name": "JavaScript", "level": 85},
    {"name": "React.js", "level": 80},
    {"name": "SQL", "level": 80},
    {"name": "HTML/CSS", "level": 90},
    {"name": "Git", "level": 85},
]

SAMPLE_PROJECTS = [
    {
        "title": "E-Commerce Platform",
        "description": (
            "A full-stack e-commerce platform with user authentication, "
            "product management, and payment integration."
        ),
        "long_description": (
            "A storefront with a product catalog, shopping cart, order "
            "management and payment integration, plus an admin panel for "
            "managing products and orders."
        ),
        "technologies": ["React.js", "Python", "FastAPI", "PostgreSQL", "Stripe API"],
        "live_url": "https://example.com/shop",
        "github_url": "https://github.com/example/ecommerce-platform",
        "featured": True,
        "status": "completed",
        "order": 1,
    },
    {
        "title": "Task Management App",
        "description": (
            "A collaborative task management application with real-time "
            "updates and team collaboration features."
        ),
        "long_description": (
            "Teams create, assign and track tasks with drag-and-drop boards, "
            "real-time notifications, roles and permissions, and analytics."
        ),
        "technologies": ["React.js", "WebSockets", "Redis", "PostgreSQL"],
        "live_url": "https://example.com/tasks",
        "github_url": "https://github.com/example/task-manager",
        "featured": True,
        "status": "completed",
        "order": 2,
    },
    {
        "title": "Weather Dashboard",
        "description": (
            "A responsive weather dashboard that displays current weather and "
            "forecasts for multiple cities."
        ),
        "long_description": (
            "Shows current conditions and a five-day forecast, with city "
            "search and a list of favourite cities kept in local storage."
        ),
        "technologies": ["JavaScript", "HTML5", "CSS3", "Chart.js"],
        "live_url": "https://example.com/weather",
        "github_url": "https://github.com/example/weather-dashboard",
        "featured": False,
        "status": "completed",
        "order": 3,
    },
    {
        "title": "Blog Platform",
        "description": (
            "A modern blog platform with content management system and user "
            "engagement features."
        ),
        "long_description": (
            "Authentication, a rich text editor, comments and social sharing, "
            "with an admin dashboard for managing content."
        ),
        "technologies": ["React.js", "Python", "SQLAlchemy", "Bootstrap"],
        "live_url": "https://example.com/blog",
        "github_url": "https://github.com/example/blog-platform",
        "featured": False,
        "status": "completed",
        "order": 4,
    },
    {
        "title": "Portfolio Website",
        "description": (
            "A professional portfolio website with admin panel for content "
            "management."
        ),
        "long_description": (
            "This site: profile, projects and contact messages managed from "
            "an admin panel, with a contact form and CV download."
        ),
        "technologies": ["React.js", "FastAPI", "SQLAlchemy", "JWT"],
        "live_url": "https://example.com",
        "github_url": "https://github.com/example/portfolio",
        "featured": True,
        "status": "completed",
        "order": 0,
    },
]
