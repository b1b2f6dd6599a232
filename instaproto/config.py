"""
Instagram API Configuration and Constants
"""

import os
import time
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# ============================================================
# API Base
# ============================================================
HOST = "i.instagram.com"
BASE_URL = f"https://{HOST}/"
API_PREFIX = "/api/v1"

# ============================================================
# Signature (signed_body)
# ============================================================
SIGNATURE_KEY = "19ce5f445dbfd9d29c59dc2a78c616a7fc090a8e018b9267bc4240a30244c53b"
SIGNATURE_VERSION = "4"
BREADCRUMB_KEY = "iN4$aGr0m"

# ============================================================
# Application
# ============================================================
APP_VERSION = "76.0.0.15.395"
APP_VERSION_CODE = "138226743"

# Mobile API App ID (X-IG-App-ID)
FACEBOOK_ANALYTICS_APPLICATION_ID = "567067343352427"
FACEBOOK_ORCA_APPLICATION_ID = "124024574287414"
FACEBOOK_OTA_FIELDS = (
    "update%7Bdownload_uri%2Cdownload_uri_delta_base%2Cversion_code_delta_base%2C"
    "download_uri_delta%2Cfallback_to_full_update%2Cfile_size_delta%2Cversion_code%2C"
    "published_date%2Cfile_size%2Cota_bundle_type%2Cresources_checksum%7D"
)

LOGIN_EXPERIMENTS = (
    "ig_growth_android_profile_pic_prefill_with_fb_pic_2,ig_android_icon_perf2,"
    "ig_android_autosubmit_password_recovery_universe,ig_android_background_voice_phone_confirmation_prefilled_phone_number_only,"
    "ig_android_report_nux_completed_device,ig_account_recovery_via_whatsapp_universe,"
    "ig_android_stories_reels_tray_media_count_check,ig_android_background_voice_confirmation_block_argentinian_numbers,"
    "ig_android_device_verification_fb_signup,ig_android_reg_nux_headers_cleanup_universe,"
    "ig_android_reg_omnibox,ig_android_background_voice_phone_confirmation,"
    "ig_android_gmail_autocomplete_account_over_one_tap,ig_android_phone_reg_redesign_universe,"
    "ig_android_skip_signup_from_one_tap_if_no_fb_sso,ig_android_reg_login_profile_photo_universe,"
    "ig_android_access_flow_prefill,ig_android_email_suggestions_universe,"
    "ig_android_contact_import_placement_universe,ig_android_ask_for_permissions_on_reg,"
    "ig_android_onboarding_skip_fb_connect,ig_account_identity_logged_out_signals_global_holdout_universe,"
    "ig_android_account_switch_infra_universe,ig_android_hide_fb_connect_for_signup,"
    "ig_restore_focus_on_reg_textbox_universe,ig_android_login_identifier_fuzzy_match,"
    "ig_android_suma_biz_account,ig_android_session_scoping_facebook_account,"
    "ig_android_security_intent_switchoff,ig_android_do_not_show_back_button_in_nux_user_list,"
    "ig_android_aymh_signal_collecting_kill_switch,ig_android_persistent_duplicate_notif_checker,"
    "ig_android_multi_tap_login_new,ig_android_nux_add_email_device,"
    "ig_android_login_safetynet,ig_android_fci_onboarding_friend_search,"
    "ig_android_editable_username_in_reg,ig_android_phone_auto_login_during_reg,"
    "ig_android_one_tap_fallback_auto_login,ig_android_device_detection_info_upload,"
    "ig_android_updated_copy_user_lookup_failed,ig_fb_invite_entry_points,"
    "ig_android_hsite_prefill_new_carrier,ig_android_gmail_oauth_in_reg,"
    "ig_two_fac_login_screen,ig_android_reg_modularization_universe,"
    "ig_android_passwordless_auth,ig_android_sim_info_upload,"
    "ig_android_universe_noticiation_channels,ig_android_realtime_manager_cleanup_universe,"
    "ig_android_analytics_accessibility_event,ig_android_direct_main_tab_universe,"
    "ig_android_email_one_tap_auto_login_during_reg,ig_android_prefill_full_name_from_fb,"
    "ig_android_directapp_camera_open_and_reset_universe,ig_challenge_kill_switch,"
    "ig_android_video_bug_report_universe,ig_account_recovery_with_code_android_universe,"
    "ig_prioritize_user_input_on_switch_to_signup,ig_android_modularized_nux_universe_device,"
    "ig_android_account_recovery_auto_login,ig_android_hide_typeahead_for_logged_users,"
    "ig_android_targeted_one_tap_upsell_universe,ig_android_caption_typeahead_fix_on_o_universe,"
    "ig_android_retry_create_account_universe,ig_android_crosshare_feed_post,"
    "ig_android_abandoned_reg_flow,ig_android_remember_password_at_login,"
    "ig_android_smartlock_hints_universe,ig_android_2fac_auto_fill_sms_universe,"
    "ig_type_ahead_recover_account,ig_android_onetaplogin_optimization,"
    "ig_android_family_apps_user_values_provider_universe,ig_android_smart_prefill_killswitch,"
    "ig_android_exoplayer_settings,ig_android_bottom_sheet,ig_android_publisher_integration,"
    "ig_sem_resurrection_logging,ig_android_login_forgot_password_universe,"
    "ig_android_hindi,ig_android_dialog_email_reg_error_universe,"
    "ig_android_low_data_mode,ig_android_reg_page_layout_universe"
)

EXPERIMENTS = (
    "ig_android_ad_stories_scroll_perf_universe,ig_android_ads_bottom_sheet_report_flow,"
    "ig_android_shopping_pdp_post_purchase_sharing,ig_android_stories_gallery_sticker_universe,"
    "ig_android_direct_thread_composer_send,ig_android_camera_new_early_show_smile_icon_universe,"
    "ig_android_feed_auto_share_to_facebook_dialog,ig_android_skip_button_content_on_connect_fb_universe,"
    "ig_android_network_perf_qpl_ppr,ig_android_post_live,ig_camera_android_focus_attribution_universe,"
    "ig_camera_async_space_validation_for_ar,ig_android_core_prefetch_new_universe,"
    "ig_android_igtv_autoplay_on_prepare,ig_android_direct_realtime_polling,"
    "ig_android_edit_location_page_info,ig_android_unfollow_reciprocal_universe,"
    "ig_android_multi_capture_camera,ig_android_stories_music_precapture,"
    "ig_android_camera_platform_effect_share_universe,ig_stories_ads_delivery_rules,"
    "ig_android_stories_viewer_drawable_cache_universe,ig_android_enable_zero_rating,"
    "ig_android_direct_app_deeplinking,ig_android_mqtt_region_hint_universe,"
    "ig_android_rn_ads_manager_universe,ig_android_live_use_rtc_upload_universe,"
    "ig_android_direct_mutation_manager_media_3,ig_android_interactions_preview_comment_impression_universe,"
    "ig_android_stories_question_sticker_music_format_prompt,ig_android_fix_direct_badge_count_universe,"
    "ig_android_save_all,ig_android_ttcp_improvements,ig_android_camera_ar_platform_profile_universe,"
    "ig_android_separate_sms_n_email_invites_setting_universe,ig_shopping_bag_universe,"
    "ig_android_ar_effects_button_display_timing,ig_android_lazy_load_swipe_navigation_panels,"
    "ig_android_video_exoplayer_2,ig_android_hashtag_unfollow_from_main_feed,"
    "ig_android_direct_thread_sidebar_send_states,ig_android_stories_face_filter,"
    "ig_android_maintabfragment,ig_android_feed_seen_state_with_view_info"
)

SUPPORTED_CAPABILITIES = [
    {"name": "SUPPORTED_SDK_VERSIONS", "value": "13.0,14.0,15.0,16.0,17.0,18.0,19.0,20.0,21.0,22.0,23.0,24.0,25.0,26.0,27.0,28.0,29.0,30.0,31.0,32.0,33.0,34.0,35.0,36.0,37.0,38.0,39.0,40.0,41.0,42.0,43.0,44.0,45.0,46.0,47.0,48.0,49.0,50.0,51.0,52.0,53.0"},
    {"name": "FACE_TRACKER_VERSION", "value": "12"},
    {"name": "segmentation", "value": "segmentation_enabled"},
    {"name": "COMPRESSION", "value": "ETC2_COMPRESSION"},
    {"name": "world_tracker", "value": "world_tracker_enabled"},
    {"name": "gyroscope", "value": "gyroscope_enabled"},
]

# ============================================================
# Default headers
# ============================================================
CAPABILITIES_HEADER = "3brTvw=="
# X-IG-Capabilities value the app sends on API requests
REQUEST_CAPABILITIES_HEADER = "3brTPw=="
CONNECTION_TYPE_HEADER = "WIFI"
RADIO_TYPE = "wifi-none"
WEBVIEW_CHROME_VERSION = "70.0.3538.110"

# ============================================================
# Rotating session ids (seconds)
# ============================================================
SESSION_ID_LIFETIME = 1200.0

# ============================================================
# Timeout (in seconds)
# ============================================================
REQUEST_TIMEOUT = 30


def local_timezone_offset() -> str:
    """Current local UTC offset in seconds (east positive)."""
    offset = time.altzone if time.localtime().tm_isdst > 0 else time.timezone
    return str(-offset)


@dataclass
class ClientSettings:
    """
    Per-session settings that are not protocol constants.

    Usage:
        settings = ClientSettings.from_env(".env")
        settings = ClientSettings(language="de_DE", proxy_url="http://ip:port")
    """

    language: str = "en_US"
    timezone_offset: str = ""
    proxy_url: Optional[str] = None
    device_seed: Optional[str] = None
    fixed_session_id: Optional[str] = None
    client_session_id_lifetime: float = SESSION_ID_LIFETIME
    pigeon_session_id_lifetime: float = SESSION_ID_LIFETIME
    request_timeout: float = REQUEST_TIMEOUT
    log_level: str = "WARNING"

    def __post_init__(self):
        if not self.timezone_offset:
            self.timezone_offset = local_timezone_offset()

    @classmethod
    def from_env(cls, env_path: str = ".env") -> "ClientSettings":
        """
        Load settings from .env file (or from the process environment).

        Variables:
            IG_LANGUAGE, IG_TIMEZONE_OFFSET, IG_PROXY_URL, IG_DEVICE_SEED,
            IG_FIXED_SESSION_ID, IG_REQUEST_TIMEOUT, IG_LOG_LEVEL
        """
        load_dotenv(env_path, override=False)
        timeout = os.getenv("IG_REQUEST_TIMEOUT")
        return cls(
            language=os.getenv("IG_LANGUAGE", "en_US"),
            timezone_offset=os.getenv("IG_TIMEZONE_OFFSET", ""),
            proxy_url=os.getenv("IG_PROXY_URL") or None,
            device_seed=os.getenv("IG_DEVICE_SEED") or None,
            fixed_session_id=os.getenv("IG_FIXED_SESSION_ID") or None,
            request_timeout=float(timeout) if timeout else REQUEST_TIMEOUT,
            log_level=os.getenv("IG_LOG_LEVEL", "WARNING"),
        )
