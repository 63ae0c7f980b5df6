"""
User-facing message catalog.

Services return message codes together with a translated text so the view
layer can show a toast without knowing about failure details. Arabic is the
primary UI language; English is kept for tooling and logs read by admins.
"""
from __future__ import annotations

from .config import DEFAULT_LOCALE


_MESSAGES: dict[str, dict[str, str]] = {
    # Catalog
    "courses_load_failed": {
        "ar": "خطأ في تحميل الكورسات",
        "en": "Could not load courses.",
    },
    "course_load_failed": {
        "ar": "خطأ في تحميل بيانات الكورس",
        "en": "Could not load the course.",
    },
    "course_not_found": {
        "ar": "الكورس غير موجود",
        "en": "Course not found.",
    },
    "lessons_load_failed": {
        "ar": "خطأ في تحميل الدروس",
        "en": "Could not load lessons.",
    },
    # Enrollment and progress
    "login_required": {
        "ar": "يجب تسجيل الدخول أولاً",
        "en": "Please sign in first.",
    },
    "enrolled": {
        "ar": "تم التسجيل في الكورس بنجاح!",
        "en": "You are now enrolled in this course!",
    },
    "already_enrolled": {
        "ar": "أنت مسجل في هذا الكورس بالفعل",
        "en": "You are already enrolled in this course.",
    },
    "enroll_failed": {
        "ar": "خطأ في التسجيل في الكورس",
        "en": "Could not enroll in the course.",
    },
    "enrollment_required": {
        "ar": "يجب التسجيل في الكورس أولاً",
        "en": "Enroll in the course first.",
    },
    "enrollments_load_failed": {
        "ar": "خطأ في تحميل الكورسات المسجلة",
        "en": "Could not load your courses.",
    },
    "enrollment_not_found": {
        "ar": "أنت غير مسجل في هذا الكورس",
        "en": "You are not enrolled in this course.",
    },
    "invalid_progress": {
        "ar": "نسبة التقدم يجب أن تكون بين 0 و 100",
        "en": "Progress must be between 0 and 100.",
    },
    "progress_update_failed": {
        "ar": "خطأ في تحديث التقدم",
        "en": "Could not update progress.",
    },
    # Reviews
    "comment_required": {
        "ar": "يرجى كتابة تعليق",
        "en": "Please write a comment.",
    },
    "invalid_rating": {
        "ar": "التقييم يجب أن يكون من 1 إلى 5",
        "en": "Rating must be between 1 and 5.",
    },
    "review_added": {
        "ar": "تم إضافة التقييم بنجاح",
        "en": "Your review was added.",
    },
    "review_failed": {
        "ar": "خطأ في إضافة التقييم",
        "en": "Could not add the review.",
    },
    "reviews_load_failed": {
        "ar": "خطأ في تحميل التقييمات",
        "en": "Could not load reviews.",
    },
    # Profile
    "profile_updated": {
        "ar": "تم تحديث الملف الشخصي بنجاح",
        "en": "Profile updated.",
    },
    "profile_update_failed": {
        "ar": "خطأ في تحديث الملف الشخصي",
        "en": "Could not update the profile.",
    },
    "profile_load_failed": {
        "ar": "خطأ في تحميل الملف الشخصي",
        "en": "Could not load the profile.",
    },
    "profile_not_found": {
        "ar": "الملف الشخصي غير موجود",
        "en": "Profile not found.",
    },
    "invalid_full_name": {
        "ar": "الاسم غير صالح",
        "en": "Invalid name.",
    },
    "invalid_avatar_url": {
        "ar": "رابط الصورة غير صالح",
        "en": "Invalid avatar URL.",
    },
    # Admin back-office
    "admin_required": {
        "ar": "هذه الصفحة للمسؤولين فقط",
        "en": "Administrator access required.",
    },
    "dashboard_load_failed": {
        "ar": "خطأ في تحميل بيانات لوحة التحكم",
        "en": "Could not load the dashboard.",
    },
    "course_created": {
        "ar": "تم إنشاء الكورس بنجاح",
        "en": "Course created.",
    },
    "course_updated": {
        "ar": "تم تحديث الكورس بنجاح",
        "en": "Course updated.",
    },
    "course_save_failed": {
        "ar": "خطأ في حفظ الكورس",
        "en": "Could not save the course.",
    },
    "course_deleted": {
        "ar": "تم حذف الكورس بنجاح",
        "en": "Course deleted.",
    },
    "course_delete_failed": {
        "ar": "خطأ في حذف الكورس",
        "en": "Could not delete the course.",
    },
    "course_published": {
        "ar": "تم نشر الكورس بنجاح",
        "en": "Course published.",
    },
    "course_unpublished": {
        "ar": "تم إخفاء الكورس بنجاح",
        "en": "Course hidden.",
    },
    "publish_toggle_failed": {
        "ar": "خطأ في تحديث حالة النشر",
        "en": "Could not change the publish state.",
    },
    "invalid_title": {
        "ar": "العنوان مطلوب ويجب ألا يتجاوز 200 حرف",
        "en": "Title is required and must be at most 200 characters.",
    },
    "invalid_description": {
        "ar": "الوصف غير صالح",
        "en": "Invalid description.",
    },
    "invalid_price": {
        "ar": "السعر يجب أن يكون رقماً موجباً",
        "en": "Price must be a non-negative number.",
    },
    "invalid_currency": {
        "ar": "العملة غير صالحة",
        "en": "Invalid currency.",
    },
    "invalid_category": {
        "ar": "التصنيف مطلوب",
        "en": "Category is required.",
    },
    "invalid_level": {
        "ar": "المستوى غير صالح",
        "en": "Level must be beginner, intermediate or advanced.",
    },
    "invalid_duration_hours": {
        "ar": "المدة يجب أن تكون رقماً موجباً",
        "en": "Duration must be a non-negative number of hours.",
    },
    "invalid_is_published": {
        "ar": "حالة النشر غير صالحة",
        "en": "Invalid publish flag.",
    },
    "invalid_thumbnail_url": {
        "ar": "رابط الصورة غير صالح",
        "en": "Invalid thumbnail URL.",
    },
    "invalid_field": {
        "ar": "حقل غير معروف",
        "en": "Unknown field.",
    },
    "lesson_created": {
        "ar": "تم إنشاء الدرس بنجاح",
        "en": "Lesson created.",
    },
    "lesson_updated": {
        "ar": "تم تحديث الدرس بنجاح",
        "en": "Lesson updated.",
    },
    "lesson_deleted": {
        "ar": "تم حذف الدرس بنجاح",
        "en": "Lesson deleted.",
    },
    "lesson_not_found": {
        "ar": "الدرس غير موجود",
        "en": "Lesson not found.",
    },
    "lesson_save_failed": {
        "ar": "خطأ في حفظ الدرس",
        "en": "Could not save the lesson.",
    },
    "lesson_delete_failed": {
        "ar": "خطأ في حذف الدرس",
        "en": "Could not delete the lesson.",
    },
    "lesson_order_taken": {
        "ar": "ترتيب الدرس مستخدم بالفعل في هذا الكورس",
        "en": "Another lesson of this course already uses that position.",
    },
    "invalid_order_index": {
        "ar": "ترتيب الدرس غير صالح",
        "en": "Lesson position must be a non-negative integer.",
    },
    "invalid_duration_minutes": {
        "ar": "مدة الدرس غير صالحة",
        "en": "Lesson duration must be a non-negative number of minutes.",
    },
    "invalid_is_free": {
        "ar": "قيمة المعاينة المجانية غير صالحة",
        "en": "Invalid free-preview flag.",
    },
    "invalid_video_url": {
        "ar": "رابط الفيديو غير صالح",
        "en": "Invalid video URL.",
    },
    "invalid_content": {
        "ar": "محتوى الدرس غير صالح",
        "en": "Invalid lesson content.",
    },
    # Pricing
    "payment_receipt_note": {
        "ar": "بعد التحويل، أرسل صورة من الإيصال على تليجرام لتفعيل اشتراكك.",
        "en": "After the transfer, send a photo of the receipt on Telegram to activate your subscription.",
    },
}


def translate(code: str, locale: str = DEFAULT_LOCALE) -> str:
    """Return the text for `code` in `locale`, falling back to Arabic, then the code."""
    entry = _MESSAGES.get(code)
    if entry is None:
        return code
    return entry.get(locale) or entry.get(DEFAULT_LOCALE) or code


def known_codes() -> frozenset[str]:
    return frozenset(_MESSAGES)


__all__ = ["translate", "known_codes"]
