"""
Health Content
Built-in health-education topics and articles
"""

import logging
from typing import List, Dict, Any
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

import models
from models import TopicCategory


logger = logging.getLogger(__name__)


@dataclass
class ArticleSeed:
    """Article shipped with the application"""
    title: str
    summary: str
    content: str
    reading_time_minutes: int = 5


@dataclass
class TopicSeed:
    """Topic shipped with the application"""
    title: str
    category: TopicCategory
    description: str
    icon: str
    order_index: int
    articles: List[ArticleSeed] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "category": self.category.value,
            "description": self.description,
            "icon": self.icon,
            "order_index": self.order_index,
            "articles": [a.title for a in self.articles],
        }


HEALTH_TOPICS: List[TopicSeed] = [
    TopicSeed(
        title="Understanding High Blood Pressure",
        category=TopicCategory.HYPERTENSION,
        description="Learn about hypertension, its causes, and how to manage it effectively",
        icon="heart",
        order_index=1,
        articles=[
            ArticleSeed(
                title="What is High Blood Pressure?",
                summary="Learn what high blood pressure is, why it matters, and when to seek medical help.",
                content=(
                    "High blood pressure, or hypertension, means the force of blood against your "
                    "artery walls stays too high. It often has no symptoms but raises the risk of "
                    "heart attack, stroke and kidney disease.\n\n"
                    "**Normal vs High Blood Pressure**\n"
                    "Normal readings are below 120/80 mmHg. Readings of 130/80 mmHg or higher on "
                    "repeated measurements are considered high.\n\n"
                    "**When to Seek Help**\n"
                    "Call your doctor for readings above 180/120 mmHg, severe headache, chest pain "
                    "or shortness of breath."
                ),
                reading_time_minutes=7,
            ),
            ArticleSeed(
                title="Diet Tips for Managing Blood Pressure",
                summary="Discover which foods can help lower blood pressure and which ones to avoid.",
                content=(
                    "What you eat has a direct effect on blood pressure.\n\n"
                    "**The DASH Approach**\n"
                    "- Fruits and vegetables at every meal\n"
                    "- Whole grains and low-fat dairy\n"
                    "- Lean protein, nuts and legumes\n\n"
                    "**Limit**\n"
                    "- Salt: aim for under 1,500 mg of sodium a day\n"
                    "- Processed and fried foods\n"
                    "- Alcohol"
                ),
                reading_time_minutes=8,
            ),
        ],
    ),
    TopicSeed(
        title="Managing Diabetes",
        category=TopicCategory.DIABETES,
        description="Essential information about diabetes management and blood sugar control",
        icon="activity",
        order_index=2,
        articles=[
            ArticleSeed(
                title="Understanding Type 2 Diabetes",
                summary="Essential information about Type 2 diabetes, its symptoms, and why management matters.",
                content=(
                    "Type 2 diabetes affects how your body uses blood sugar. Either too little "
                    "insulin is produced or the body does not respond to it well.\n\n"
                    "**Common Symptoms**\n"
                    "- Increased thirst and urination\n"
                    "- Fatigue and blurred vision\n"
                    "- Slow-healing sores\n\n"
                    "**Why Management Matters**\n"
                    "Keeping blood sugar in range protects your eyes, kidneys, nerves and heart."
                ),
                reading_time_minutes=8,
            ),
        ],
    ),
    TopicSeed(
        title="Heart Health Basics",
        category=TopicCategory.HEART_HEALTH,
        description="Tips for maintaining a healthy heart as you age",
        icon="heart-pulse",
        order_index=3,
    ),
    TopicSeed(
        title="Healthy Eating Guide",
        category=TopicCategory.DIET,
        description="Nutritional advice for managing chronic conditions",
        icon="apple",
        order_index=4,
    ),
    TopicSeed(
        title="Exercise for Seniors",
        category=TopicCategory.EXERCISE,
        description="Safe and effective exercises for older adults",
        icon="dumbbell",
        order_index=5,
        articles=[
            ArticleSeed(
                title="Safe Exercise for Seniors",
                summary="Learn about safe, effective exercises for older adults with chronic conditions.",
                content=(
                    "Regular activity lowers blood pressure and blood sugar, strengthens the heart "
                    "and bones, and improves balance.\n\n"
                    "**Getting Started**\n"
                    "- Talk to your doctor before starting a new routine\n"
                    "- Begin with 10 minutes of walking and build up to 30\n"
                    "- Add gentle stretching and balance exercises\n\n"
                    "**Stop and Rest If You Feel**\n"
                    "Chest pain, dizziness or unusual shortness of breath."
                ),
                reading_time_minutes=9,
            ),
        ],
    ),
    TopicSeed(
        title="Medication Safety Tips",
        category=TopicCategory.MEDICATION_SAFETY,
        description="Important guidelines for taking medications safely",
        icon="shield-check",
        order_index=6,
        articles=[
            ArticleSeed(
                title="Taking Medications Safely",
                summary="Essential guidelines for taking medications safely and effectively.",
                content=(
                    "Taking medications correctly is central to managing chronic conditions.\n\n"
                    "**Know Your Medications**\n"
                    "- The name, purpose and dose of each one\n"
                    "- When and how to take it\n"
                    "- Common side effects\n\n"
                    "**Stay on Schedule**\n"
                    "- Take doses at the same time each day\n"
                    "- Use reminders and a pill organizer\n"
                    "- Never double up after a missed dose without asking your pharmacist"
                ),
                reading_time_minutes=10,
            ),
        ],
    ),
]


def seed_health_content(db: Session) -> int:
    """
    Insert the built-in topics and articles when the topic table is empty.

    Returns:
        Number of topics inserted
    """
    if db.query(models.HealthTopic.id).first():
        return 0

    for seed in HEALTH_TOPICS:
        topic = models.HealthTopic(
            title=seed.title,
            category=seed.category,
            description=seed.description,
            icon=seed.icon,
            order_index=seed.order_index,
        )
        for article in seed.articles:
            topic.articles.append(models.HealthArticle(
                title=article.title,
                summary=article.summary,
                content=article.content,
                reading_time_minutes=article.reading_time_minutes,
            ))
        db.add(topic)

    db.commit()
    logger.info(f"Seeded {len(HEALTH_TOPICS)} health topics")
    return len(HEALTH_TOPICS)
