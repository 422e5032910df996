"""Discord commands and UI components for cronbot."""
