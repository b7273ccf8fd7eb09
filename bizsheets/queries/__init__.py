from .dashboard import DashboardQuery, build_dashboard

__all__ = ['DashboardQuery', 'build_dashboard']
