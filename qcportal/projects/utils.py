import logging

from .models import ProjectActivity

logger = logging.getLogger(__name__)


def add_missing_activities(planning, activity_ids, user=None):
    """
    Give the planning one live ProjectActivity per distinct activity id.

    Existing live rows are left alone, retired rows are brought back and
    new rows start as Not Started. Rows for activities outside activity_ids
    are never removed. Returns the rows created or revived.
    """
    wanted = list(dict.fromkeys(int(activity_id) for activity_id in activity_ids))
    existing = {row.activity_id: row for row in planning.project_activities.all()}

    touched = []
    for activity_id in wanted:
        row = existing.get(activity_id)
        if row is None:
            row = ProjectActivity.objects.create(
                planning=planning,
                activity_id=activity_id,
                activity_status='Not Started',
                created_by=user,
                modified_by=user,
            )
            touched.append(row)
        elif not row.is_live:
            row.is_live = True
            row.modified_by = user
            row.save(update_fields=['is_live', 'modified_by', 'updated_at'])
            touched.append(row)

    if touched:
        logger.info(f"Planning {planning.project_no}: added {len(touched)} activities")
    return touched
