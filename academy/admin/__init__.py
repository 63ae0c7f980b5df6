"""Admin back-office: course and lesson management, dashboard totals."""
