"""Configuration for the offline rule corpus and the dictionary speller.

This module defines the rules that are disabled unless a caller opts in,
the British spelling rules that are switched off for ``en-GB`` documents,
and the words the dictionary speller never flags.
"""

# Rules that are too noisy to run by default (can be re-enabled via config)
DEFAULT_DISABLED_RULES = {
    "punct-001",  # Oxford comma
    "punct-004",  # lowercase after colon
    "word-015",  # generic passive voice
}

# American-spelling rules; irrelevant when the document language is British.
BRITISH_SPELLING_RULES = {
    "spell-016",
    "spell-017",
    "spell-018",
    "spell-019",
    "spell-020",
    "spell-021",
}


# Words the dictionary speller ignores (case-insensitive). Mostly research
# vocabulary, statistics jargon and abbreviations missing from the default
# frequency list.
DEFAULT_IGNORED_WORDS = {
    # --- Statistics ---
    "anova", "ancova", "manova", "chi", "covariate", "covariates", "heteroscedasticity",
    "homoscedasticity", "multicollinearity", "dichotomous", "ordinal", "bivariate",
    "multivariate", "univariate", "posthoc", "bonferroni", "kurtosis", "skewness",

    # --- Research methods ---
    "preregistered", "preregistration", "operationalised", "operationalized", "meta",
    "metaanalysis", "codebook", "cohort", "longitudinal", "subsample", "subsamples",
    "counterbalanced", "counterbalancing", "randomised", "randomized",

    # --- Citation / Latin ---
    "al", "ibid", "viz", "cf", "doi", "isbn", "et",

    # --- Misc ---
    "dataset", "datasets", "online", "email", "website", "workflow",
}
