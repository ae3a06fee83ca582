from i18n_scanner.scanners.keys import DEFAULT_PREFIX, context_prefix, suggest_key


def test_notification_context_prefix_and_camel_case():
    assert suggest_key("Message.error", "Network error") == "error.networkError"
    assert suggest_key("message.success", "Saved successfully!") == "success.savedSuccessfully"
    assert suggest_key("toast.warning", "LOW Disk space") == "warning.lowDiskSpace"


def test_property_and_attribute_contexts():
    assert suggest_key("placeholder", "Enter your e-mail") == "placeholder.enterYourEmail"
    assert suggest_key("helpText", "Use 8+ chars") == "help.use8Chars"
    assert suggest_key("alt", "Company logo") == "common.companyLogo"


def test_native_script_words_are_kept():
    assert suggest_key("title", "저장 실패 Now") == "title.저장실패Now"
    assert suggest_key("label", "설정") == "label.설정"


def test_suggestion_is_deterministic():
    first = suggest_key("notification.info", "  Update available, restart now ")
    second = suggest_key("notification.info", "  Update available, restart now ")
    assert first == second == "info.updateAvailableRestartNow"


def test_text_without_words_gives_empty_key_body():
    assert suggest_key("confirm", "?!") == "confirm."


def test_unknown_context_uses_default_prefix():
    assert context_prefix(None) == DEFAULT_PREFIX
    assert context_prefix("") == DEFAULT_PREFIX
    assert context_prefix("showError") == DEFAULT_PREFIX
    assert context_prefix("tooltip") == "tooltip"
