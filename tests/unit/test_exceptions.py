from progressiveforms.exceptions import (
    BackendError,
    DependencyError,
    InvalidRequestError,
    PackageError,
    RecommendationNotFoundError,
    RuleLoadError,
    SessionNotFoundError,
    SessionStateError,
    SettingsError,
)


def test_root_exception_hierarchy() -> None:
    for error_type in (
        BackendError,
        DependencyError,
        InvalidRequestError,
        RecommendationNotFoundError,
        RuleLoadError,
        SessionNotFoundError,
        SessionStateError,
        SettingsError,
    ):
        assert issubclass(error_type, PackageError)


def test_error_messages() -> None:
    assert str(InvalidRequestError(message="Form data is required", field="form_data")) == (
        "Form data is required (form_data)"
    )
    assert str(InvalidRequestError(message="Session ID is required")) == "Session ID is required"
    assert str(SessionNotFoundError(session_id="s1")) == "Form session not found: s1"
    assert str(RecommendationNotFoundError(recommendation_id="r1")) == "Field recommendation not found: r1"
    assert str(SessionStateError(session_id="s1", current="completed", requested="abandoned")) == (
        "Cannot move session s1 from 'completed' to 'abandoned'"
    )
    assert str(DependencyError(missing_package=["openai"], message="recommendations")) == (
        "Missing runtime dependencies for 'recommendations': openai"
    )
    assert str(SettingsError(exc=ValueError("bad"))) == "Failed to load settings: bad"
    assert str(SettingsError()) == "Failed to load settings"
