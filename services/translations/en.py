# -*- coding: utf-8 -*-
"""English translations."""

EN_TRANSLATIONS = {
    # Wizard steps
    "wizard.step.company_investment": "Company & Investment Details",
    "wizard.step.company_founders": "Company & Founders",
    "wizard.step.marketing_pitch": "Marketing, Pitch & VCs",
    "wizard.step.investment_tracking": "Investment Tracking",

    # Wizard status
    "wizard.submit.in_progress": "Saving investment...",

    # URL validation
    "validation.url.pending": "Checking URL...",
    "validation.url.unreachable": "URL responded {status}. Please check the URL and try again.",
    "validation.url.unreachable_generic": "URL responded with an error. Please check the URL and try again.",
    "validation.url.check_failed": "Unable to validate URL. Please check your connection and try again.",
    "validation.url.invalid_format": "Invalid URL format",

    # Submission errors
    "error.submission.failed": "Failed to save the investment. Your data has been kept, please try again.",
    "error.submission.missing_vcs": "Cannot create investment: {count} VCs not found in database: {names}",
    "error.submission.partial": "The investment was only partially saved ({steps}). Please review before retrying.",
    "error.draft.storage": "Your draft could not be saved locally.",
    "error.unexpected": "An unexpected error occurred.",
}
