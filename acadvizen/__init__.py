"""AcadVizen Digital Hub enrollment and payments API."""
