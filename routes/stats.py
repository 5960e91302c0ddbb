from fastapi import APIRouter, Depends, HTTPException
from db.database import get_db
from db.repository import deck_exists
from utils.deck_summary import percentage

router = APIRouter()

@router.get("/decks/{deck_id}")
async def deck_stats(deck_id: int, conn = Depends(get_db)):
    """Review history for a deck: totals, success rate, grade distribution, streaks."""
    if not deck_exists(conn, deck_id):
        raise HTTPException(status_code=404, detail="Deck not found")
    cursor = conn.cursor()
    cursor.execute("""
        SELECT quality, COUNT(*) FROM reviews WHERE deck_id = ? GROUP BY quality
    """, (deck_id,))
    grades = {int(row[0]): row[1] for row in cursor.fetchall()}
    total_reviews = sum(grades.values())
    correct = sum(count for quality, count in grades.items() if quality >= 3)
    cursor.execute("""
        SELECT MAX(current_streak), AVG(average_answer_seconds), AVG(ease_factor)
        FROM cards WHERE deck_id = ? AND deleted_at IS NULL
    """, (deck_id,))
    max_streak, avg_seconds, avg_ease = cursor.fetchone()
    return {
        "deck_id": deck_id,
        "total_reviews": total_reviews,
        "correct_reviews": correct,
        "success_rate": percentage(correct, total_reviews),
        "grades": grades,
        "max_streak": max_streak or 0,
        "average_answer_seconds": round(avg_seconds, 1) if avg_seconds is not None else None,
        "average_ease_factor": round(avg_ease, 2) if avg_ease is not None else None,
    }
