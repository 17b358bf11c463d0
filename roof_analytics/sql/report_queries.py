"""
Saved reports and dashboard configurations, both scoped to one user.

Parameters (in order):
- SAVED_REPORTS_QUERY / DASHBOARD_CONFIGS_QUERY: $1 user_id
- SAVED_REPORT_INSERT_QUERY: user_id, report_name, report_type, parameters, schedule
- DASHBOARD_DEFAULT_RESET_QUERY: $1 user_id
- DASHBOARD_CONFIG_INSERT_QUERY: user_id, dashboard_name, configuration, is_default
"""

from typing import List


SAVED_REPORT_COLUMNS: List[str] = [
    'user_id',
    'report_name',
    'report_type',
    'parameters',
    'schedule',
]

DASHBOARD_CONFIG_COLUMNS: List[str] = [
    'user_id',
    'dashboard_name',
    'configuration',
    'is_default',
]


SAVED_REPORTS_QUERY = """
    SELECT id, user_id, report_name, report_type, parameters, schedule,
           last_generated, created_at
    FROM saved_reports
    WHERE user_id = $1
    ORDER BY created_at DESC, id DESC
"""

SAVED_REPORT_INSERT_QUERY = """
    INSERT INTO saved_reports (user_id, report_name, report_type, parameters, schedule)
    VALUES ($1, $2, $3, $4, $5)
    RETURNING *
"""


DASHBOARD_CONFIGS_QUERY = """
    SELECT id, user_id, dashboard_name, configuration, is_default,
           created_at, updated_at
    FROM dashboard_configurations
    WHERE user_id = $1
    ORDER BY is_default DESC, created_at DESC, id DESC
"""

# At most one default per user: cleared before a new default is inserted
DASHBOARD_DEFAULT_RESET_QUERY = """
    UPDATE dashboard_configurations
    SET is_default = FALSE
    WHERE user_id = $1 AND is_default = TRUE
"""

DASHBOARD_CONFIG_INSERT_QUERY = """
    INSERT INTO dashboard_configurations
        (user_id, dashboard_name, configuration, is_default, updated_at)
    VALUES ($1, $2, $3, $4, CURRENT_TIMESTAMP)
    RETURNING *
"""
