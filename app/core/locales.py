# app/core/locales.py

import logging
from typing import Dict, Literal

logger = logging.getLogger(__name__)

Language = Literal["en", "ar"]
SUPPORTED_LANGUAGES = ("en", "ar")
DEFAULT_LANGUAGE: Language = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    # --- API errors ---
    "INTERNAL_ERROR": {
        "en": "Internal Server Error.",
        "ar": "حدث خطأ داخلي في الخادم.",
    },
    "CONCURRENT_UPDATE": {
        "en": "This record was changed by someone else. Reload and try again.",
        "ar": "تم تعديل هذا السجل من قبل مستخدم آخر. أعد التحميل وحاول مرة أخرى.",
    },
    "ADMIN_REQUIRED": {
        "en": "You do not have permission to access this resource.",
        "ar": "ليس لديك صلاحية للوصول إلى هذا المورد.",
    },
    "NOTIFICATION_NOT_FOUND": {
        "en": "Notification not found.",
        "ar": "الإشعار غير موجود.",
    },
    "ORDER_NOT_FOUND": {
        "en": "Order not found.",
        "ar": "الطلب غير موجود.",
    },
    "ORDER_ACCESS_DENIED": {
        "en": "Access denied.",
        "ar": "الوصول مرفوض.",
    },
    "ORDER_EMPTY": {
        "en": "Order must include at least one item.",
        "ar": "يجب أن يتضمن الطلب عنصراً واحداً على الأقل.",
    },
    "ORDER_MIXED_LTA": {
        "en": "All items must be from the same LTA.",
        "ar": "يجب أن تكون جميع العناصر من نفس الاتفاقية.",
    },
    "LTA_NOT_ASSIGNED": {
        "en": "You are not authorized to order from this LTA.",
        "ar": "أنت غير مخول بالطلب من هذه الاتفاقية.",
    },
    "PRODUCT_NOT_IN_LTA": {
        "en": "Product {sku} is not available in this LTA.",
        "ar": "المنتج {sku} غير متاح في هذه الاتفاقية.",
    },
    "INVALID_PRICE": {
        "en": "Invalid price for product {sku}.",
        "ar": "سعر غير صحيح للمنتج {sku}.",
    },
    "INSUFFICIENT_STOCK": {
        "en": "Insufficient stock for {name}.",
        "ar": "مخزون غير كافٍ لـ {name}.",
    },
    "ORDER_ALREADY_CANCELLED": {
        "en": "Order is already cancelled.",
        "ar": "الطلب ملغى بالفعل.",
    },
    "ORDER_NOT_CANCELLABLE": {
        "en": "Orders with status \"{status}\" cannot be cancelled.",
        "ar": "لا يمكن إلغاء الطلبات بحالة \"{status}\".",
    },
    "CANCELLATION_REASON_REQUIRED": {
        "en": "Cancellation reason is required.",
        "ar": "سبب الإلغاء مطلوب.",
    },
    "INVALID_ORDER_TRANSITION": {
        "en": "Cannot move order from \"{current}\" to \"{target}\".",
        "ar": "لا يمكن نقل الطلب من \"{current}\" إلى \"{target}\".",
    },
    "MODIFICATION_NOT_ALLOWED": {
        "en": "Orders with status \"{status}\" cannot be modified.",
        "ar": "لا يمكن تعديل الطلبات بحالة \"{status}\".",
    },
    "MODIFICATION_PENDING": {
        "en": "A modification request is already pending for this order.",
        "ar": "يوجد طلب تعديل قيد المراجعة لهذا الطلب.",
    },
    "MODIFICATION_ITEMS_REQUIRED": {
        "en": "New items are required for an item modification.",
        "ar": "العناصر الجديدة مطلوبة لتعديل العناصر.",
    },
    "MODIFICATION_NOT_FOUND": {
        "en": "Modification request not found.",
        "ar": "طلب التعديل غير موجود.",
    },
    "MODIFICATION_ALREADY_REVIEWED": {
        "en": "This modification request has already been reviewed.",
        "ar": "تمت مراجعة طلب التعديل هذا بالفعل.",
    },
    "MODIFICATION_ORDER_CLOSED": {
        "en": "The order is \"{status}\" and no longer awaits this modification.",
        "ar": "حالة الطلب \"{status}\" ولم يعد بانتظار هذا التعديل.",
    },
    "PRICE_OFFER_NOT_FOUND": {
        "en": "Price offer not found.",
        "ar": "عرض السعر غير موجود.",
    },
    "PRICE_OFFER_NUMBER_TAKEN": {
        "en": "Offer number {offer_number} already exists.",
        "ar": "رقم العرض {offer_number} موجود بالفعل.",
    },
    "PRICE_OFFER_NO_ITEMS": {
        "en": "A price offer must include at least one item.",
        "ar": "يجب أن يتضمن عرض السعر عنصراً واحداً على الأقل.",
    },
    "INVALID_OFFER_TRANSITION": {
        "en": "Cannot move price offer from \"{current}\" to \"{target}\".",
        "ar": "لا يمكن نقل عرض السعر من \"{current}\" إلى \"{target}\".",
    },
    "PRICE_OFFER_EXPIRED": {
        "en": "This price offer has expired.",
        "ar": "انتهت صلاحية عرض السعر هذا.",
    },
    "LTA_NOT_FOUND": {
        "en": "LTA not found.",
        "ar": "الاتفاقية غير موجودة.",
    },
    "LTA_PRODUCT_NOT_FOUND": {
        "en": "Product is not assigned to this LTA.",
        "ar": "المنتج غير مرتبط بهذه الاتفاقية.",
    },
    "PRODUCT_NOT_FOUND": {
        "en": "Product not found.",
        "ar": "المنتج غير موجود.",
    },
    "SKU_TAKEN": {
        "en": "A product with SKU {sku} already exists.",
        "ar": "يوجد منتج برمز {sku} بالفعل.",
    },
    "CLIENT_NOT_FOUND": {
        "en": "Client not found.",
        "ar": "العميل غير موجود.",
    },
    "VENDOR_NOT_FOUND": {
        "en": "Vendor not found.",
        "ar": "المورد غير موجود.",
    },
    "VENDOR_NUMBER_TAKEN": {
        "en": "Vendor number {vendor_number} already exists.",
        "ar": "رقم المورد {vendor_number} موجود بالفعل.",
    },
    "FEEDBACK_NOT_ELIGIBLE": {
        "en": "Order not found or not eligible for feedback.",
        "ar": "الطلب غير موجود أو غير مؤهل للتقييم.",
    },
    "FEEDBACK_ALREADY_SUBMITTED": {
        "en": "Feedback already submitted for this order.",
        "ar": "تم إرسال التقييم لهذا الطلب بالفعل.",
    },
    "FEEDBACK_NOT_FOUND": {
        "en": "Feedback not found.",
        "ar": "التقييم غير موجود.",
    },
    "ISSUE_NOT_FOUND": {
        "en": "Issue report not found.",
        "ar": "البلاغ غير موجود.",
    },
    "DOCUMENT_NOT_FOUND": {
        "en": "Document not found.",
        "ar": "المستند غير موجود.",
    },
    "DOCUMENT_ACCESS_DENIED": {
        "en": "You do not have access to this document.",
        "ar": "ليس لديك صلاحية الوصول إلى هذا المستند.",
    },
    "DOCUMENT_TOKEN_INVALID": {
        "en": "Invalid download token.",
        "ar": "رمز التنزيل غير صالح.",
    },
    "DOCUMENT_TOKEN_EXPIRED": {
        "en": "Download link has expired.",
        "ar": "انتهت صلاحية رابط التنزيل.",
    },
    "DOCUMENT_FILE_MISSING": {
        "en": "Document file is not available.",
        "ar": "ملف المستند غير متوفر.",
    },
    "FILE_REQUIRED": {
        "en": "No file was provided for upload.",
        "ar": "لم يتم تقديم ملف للتحميل.",
    },

    # --- Client toasts ---
    "TOAST_ERROR_TITLE": {
        "en": "Error",
        "ar": "خطأ",
    },
    "TOAST_MARK_READ_FAILED": {
        "en": "Failed to mark notification as read.",
        "ar": "فشل تحديد الإشعار كمقروء.",
    },
    "TOAST_DELETE_FAILED": {
        "en": "Failed to delete notification.",
        "ar": "فشل حذف الإشعار.",
    },
    "TOAST_MARK_ALL_READ_FAILED": {
        "en": "Failed to mark all notifications as read.",
        "ar": "فشل تحديد جميع الإشعارات كمقروءة.",
    },
    "TOAST_DELETE_ALL_READ_FAILED": {
        "en": "Failed to delete read notifications.",
        "ar": "فشل حذف الإشعارات المقروءة.",
    },
    "TOAST_SESSION_EXPIRED": {
        "en": "Your session has expired. Please sign in again.",
        "ar": "انتهت جلستك. يرجى تسجيل الدخول مرة أخرى.",
    },
    "TOAST_NETWORK_ERROR": {
        "en": "Unable to reach the server. Check your connection.",
        "ar": "تعذر الوصول إلى الخادم. تحقق من اتصالك.",
    },
    "TOAST_RATE_LIMITED": {
        "en": "Too many requests. Please wait a moment.",
        "ar": "طلبات كثيرة جداً. يرجى الانتظار قليلاً.",
    },
    "SOMETHING_WENT_WRONG": {
        "en": "Something went wrong.",
        "ar": "حدث خطأ ما.",
    },

    # --- Notification copy ---
    "NOTIFY_ORDER_CREATED_TITLE": {
        "en": "New Order",
        "ar": "طلب جديد",
    },
    "NOTIFY_ORDER_CREATED_MESSAGE": {
        "en": "{client} placed order #{order_id} ({total}).",
        "ar": "قام {client} بتقديم الطلب رقم {order_id} ({total}).",
    },
    "NOTIFY_ORDER_STATUS_TITLE": {
        "en": "Order Status Updated",
        "ar": "تم تحديث حالة الطلب",
    },
    "NOTIFY_ORDER_STATUS_MESSAGE": {
        "en": "Order #{order_id} is now {status}.",
        "ar": "الطلب رقم {order_id} أصبح الآن {status}.",
    },
    "NOTIFY_ORDER_CANCELLED_TITLE": {
        "en": "Order Cancelled",
        "ar": "تم إلغاء الطلب",
    },
    "NOTIFY_ORDER_CANCELLED_MESSAGE": {
        "en": "Client {client} cancelled order #{order_id}: {reason}",
        "ar": "ألغى العميل {client} الطلب رقم {order_id}: {reason}",
    },
    "NOTIFY_MODIFICATION_REQUESTED_TITLE": {
        "en": "Order Modification Requested",
        "ar": "طلب تعديل على الطلب",
    },
    "NOTIFY_MODIFICATION_REQUESTED_MESSAGE": {
        "en": "{client} requested a change to order #{order_id}.",
        "ar": "طلب {client} تعديلاً على الطلب رقم {order_id}.",
    },
    "NOTIFY_MODIFICATION_APPROVED_TITLE": {
        "en": "Modification Approved",
        "ar": "تمت الموافقة على التعديل",
    },
    "NOTIFY_MODIFICATION_REJECTED_TITLE": {
        "en": "Modification Rejected",
        "ar": "تم رفض التعديل",
    },
    "NOTIFY_MODIFICATION_REVIEWED_MESSAGE": {
        "en": "Your modification request for order #{order_id} has been reviewed.",
        "ar": "تمت مراجعة طلب التعديل للطلب رقم {order_id}.",
    },
    "NOTIFY_PRICE_OFFER_READY_TITLE": {
        "en": "Price Offer Ready",
        "ar": "عرض السعر جاهز",
    },
    "NOTIFY_PRICE_OFFER_READY_MESSAGE": {
        "en": "Price offer {offer_number} is ready for your review.",
        "ar": "عرض السعر {offer_number} جاهز للمراجعة.",
    },
    "NOTIFY_PRICE_OFFER_RESPONDED_TITLE": {
        "en": "Price Offer Response",
        "ar": "رد على عرض السعر",
    },
    "NOTIFY_PRICE_OFFER_RESPONDED_MESSAGE": {
        "en": "{client} {status} price offer {offer_number}.",
        "ar": "قام {client} بالرد ({status}) على عرض السعر {offer_number}.",
    },
    "NOTIFY_ISSUE_REPORT_TITLE": {
        "en": "New Issue Report",
        "ar": "بلاغ جديد",
    },
    "NOTIFY_ISSUE_REPORT_MESSAGE": {
        "en": "[{severity}] {title}",
        "ar": "[{severity}] {title}",
    },
}


def normalize_language(language: str | None) -> Language:
    """Returns a supported language code, falling back to English."""
    if language in SUPPORTED_LANGUAGES:
        return language  # type: ignore[return-value]
    return DEFAULT_LANGUAGE


def translate(key: str, language: str | None = DEFAULT_LANGUAGE, **fmt) -> str:
    """Looks up a message in the requested language and formats it."""
    entry = MESSAGES.get(key)
    if entry is None:
        logger.warning(f"Missing locale key: {key}")
        return key
    template = entry[normalize_language(language)]
    return template.format(**fmt) if fmt else template


def error_detail(key: str, **fmt) -> Dict[str, str]:
    """Bilingual `detail` payload for an HTTPException."""
    return {
        "code": key,
        "message": translate(key, "en", **fmt),
        "message_ar": translate(key, "ar", **fmt),
    }
