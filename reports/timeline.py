"""
Display-ordered projection of a report's update history.
"""


def _actor(user):
    if user is None:
        return None
    return {'id': str(user.pk), 'name': user.name, 'role': user.role}


def build_timeline(report):
    """
    [{status, message, updatedBy: {id, name, role}, createdAt}, ...]
    oldest first.
    """
    updates = report.updates.select_related('updated_by').order_by('timestamp', 'sequence')
    return [
        {
            'status': update.status,
            'message': update.message,
            'updatedBy': _actor(update.updated_by),
            'createdAt': update.timestamp,
        }
        for update in updates
    ]
