"""TalentDesk: HR and recruitment back office with role-based access control."""

__version__ = "0.3.0"
